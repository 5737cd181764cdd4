"""
Word Export - Serialize reconstructed paragraphs

Three targets: Word-compatible HTML (.doc), a real .docx via python-docx,
and plain text.
"""

from html import escape
from io import BytesIO
from typing import Iterable, List

from docx import Document

from layout_engine.layout import LayoutItem, PageBreak, PageText, strip_control_chars

WORD_HTML_HEADER = (
    "<html xmlns:o='urn:schemas-microsoft-com:office:office' "
    "xmlns:w='urn:schemas-microsoft-com:office:word' "
    "xmlns='http://www.w3.org/TR/REC-html40'>"
    "<head><meta charset='utf-8'><title>{title}</title></head><body>"
)
WORD_HTML_FOOTER = "</body></html>"
WORD_HTML_PAGE_BREAK = '<br style="page-break-after:always;"></br>'


def to_word_html(items: Iterable[LayoutItem], title: str = "Converted Document") -> str:
    """HTML that Word opens as a document, one <p> per paragraph"""
    body: List[str] = []
    for item in items:
        if isinstance(item, PageBreak):
            body.append(WORD_HTML_PAGE_BREAK)
        elif isinstance(item, PageText):
            body.extend(f"<p>{escape(paragraph)}</p>" for paragraph in item.paragraphs)
    return WORD_HTML_HEADER.format(title=escape(title)) + "".join(body) + WORD_HTML_FOOTER


def to_docx(items: Iterable[LayoutItem]) -> bytes:
    document = Document()
    for item in items:
        if isinstance(item, PageBreak):
            document.add_page_break()
        elif isinstance(item, PageText):
            for paragraph in item.paragraphs:
                document.add_paragraph(strip_control_chars(paragraph))
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def to_plain_text(items: Iterable[LayoutItem]) -> str:
    """Paragraphs separated by blank lines, pages by form feeds"""
    chunks: List[str] = []
    for item in items:
        if isinstance(item, PageBreak):
            chunks.append("\f")
        elif isinstance(item, PageText):
            chunks.append("\n\n".join(item.paragraphs))
    return "\n".join(chunks) + "\n"
