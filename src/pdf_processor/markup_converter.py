"""
Markup Converter - Turn word-processing documents into simplified HTML

Only structure the renderer can reproduce is kept: headings, paragraphs
with alignment, bold/italic/underline runs, bullet and numbered lists,
and tables. Embedded images and floating shapes are dropped.
"""

from html import escape
from io import BytesIO
from typing import Iterator, List, Optional, Union
import logging
import re
import zipfile

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.opc.exceptions import PackageNotFoundError
from docx.oxml.ns import qn
from docx.table import Table
from docx.text.paragraph import Paragraph

from layout_engine.errors import CorruptOrProtectedError

logger = logging.getLogger(__name__)

_HEADING_STYLE = re.compile(r"^Heading (\d)$")

_ALIGNMENTS = {
    WD_ALIGN_PARAGRAPH.CENTER: "center",
    WD_ALIGN_PARAGRAPH.RIGHT: "right",
    WD_ALIGN_PARAGRAPH.JUSTIFY: "justify",
}


def _iter_blocks(document) -> Iterator[Union[Paragraph, Table]]:
    """Paragraphs and tables in body order"""
    for child in document.element.body.iterchildren():
        if child.tag == qn("w:p"):
            yield Paragraph(child, document)
        elif child.tag == qn("w:tbl"):
            yield Table(child, document)


def _runs_markup(paragraph: Paragraph) -> str:
    parts = []
    for run in paragraph.runs:
        text = escape(run.text)
        if not text:
            continue
        if run.bold:
            text = f"<b>{text}</b>"
        if run.italic:
            text = f"<i>{text}</i>"
        if run.underline:
            text = f"<u>{text}</u>"
        parts.append(text)
    return "".join(parts)


def _list_tag(style_name: str) -> Optional[str]:
    if style_name.startswith("List Bullet"):
        return "ul"
    if style_name.startswith("List Number"):
        return "ol"
    return None


def _table_markup(table: Table) -> str:
    rows = []
    for row in table.rows:
        cells = "".join(f"<td>{escape(cell.text)}</td>" for cell in row.cells)
        rows.append(f"<tr>{cells}</tr>")
    return f"<table>{''.join(rows)}</table>"


class DocxConverter:
    """Markup conversion collaborator for .docx files, backed by python-docx"""

    def to_markup(self, data: bytes) -> str:
        """
        Convert .docx bytes to an HTML fragment

        Raises:
            CorruptOrProtectedError: If the bytes are not a readable .docx package
        """
        try:
            document = Document(BytesIO(data))
        except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as e:
            logger.error(f"Error opening .docx: {e}")
            raise CorruptOrProtectedError(str(e)) from e

        html: List[str] = []
        open_list: Optional[str] = None

        for block in _iter_blocks(document):
            if isinstance(block, Table):
                if open_list:
                    html.append(f"</{open_list}>")
                    open_list = None
                html.append(_table_markup(block))
                continue

            style_name = block.style.name if block.style is not None else ""
            list_tag = _list_tag(style_name)
            if open_list and list_tag != open_list:
                html.append(f"</{open_list}>")
                open_list = None

            content = _runs_markup(block)
            if list_tag:
                if not open_list:
                    html.append(f"<{list_tag}>")
                    open_list = list_tag
                html.append(f"<li>{content}</li>")
                continue

            heading = _HEADING_STYLE.match(style_name)
            if style_name == "Title":
                tag = "h1"
            elif heading:
                tag = f"h{min(int(heading.group(1)), 6)}"
            else:
                tag = "p"

            align = _ALIGNMENTS.get(block.alignment)
            style = f' style="text-align:{align}"' if align else ""
            # Keep empty paragraphs as vertical space
            html.append(f"<{tag}{style}>{content or '&#160;'}</{tag}>")

        if open_list:
            html.append(f"</{open_list}>")

        logger.debug(f"Converted .docx into {len(html)} markup blocks")
        return "\n".join(html)


def plain_text_to_markup(text: str) -> str:
    """Blank lines separate paragraphs; single newlines become line breaks"""
    paragraphs = re.split(r"\n\s*\n", text.replace("\r\n", "\n").strip())
    return "\n".join(
        "<p>{}</p>".format("<br/>".join(escape(line) for line in paragraph.split("\n")))
        for paragraph in paragraphs if paragraph.strip()
    )
