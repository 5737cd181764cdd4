"""
PDF Reader - Open, describe, rasterize and extract text from PDF bytes
This module uses PyMuPDF (fitz) as the render/parse collaborator.
"""

import fitz  # PyMuPDF
from typing import List, Optional
import logging

from layout_engine.errors import CorruptOrProtectedError, PreconditionViolation, RenderFailure
from layout_engine.geometry import DocumentInfo, PageSize, RasterFrame
from layout_engine.interfaces import RenderedPage
from layout_engine.layout import GlyphRun

logger = logging.getLogger(__name__)


def open_pdf(data: bytes, password: Optional[str] = None) -> fitz.Document:
    """
    Open PDF bytes

    Args:
        data: Raw PDF bytes
        password: Password for encrypted documents

    Returns:
        Open fitz.Document; the caller closes it

    Raises:
        CorruptOrProtectedError: If the bytes are not a readable PDF or the
            password is missing or wrong
    """
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        logger.error(f"Error opening PDF: {e}")
        raise CorruptOrProtectedError(str(e)) from e

    if doc.needs_pass and not (password and doc.authenticate(password)):
        doc.close()
        logger.error("PDF is password-protected")
        raise CorruptOrProtectedError("Password required", password_required=True)

    if doc.page_count == 0:
        doc.close()
        raise CorruptOrProtectedError("PDF has no pages")
    return doc


class PdfRenderer:
    """Render/parse collaborator backed by PyMuPDF"""

    def __init__(self, password: Optional[str] = None):
        self.password = password

    def describe(self, data: bytes) -> DocumentInfo:
        """Page count and page sizes in points"""
        with open_pdf(data, self.password) as doc:
            sizes = tuple(PageSize(page.rect.width, page.rect.height) for page in doc)
        logger.debug(f"Described PDF with {len(sizes)} pages")
        return DocumentInfo(sizes)

    def render_page(self, data: bytes, page_index: int, scale: float) -> RenderedPage:
        """Rasterize one page at the given pixels-per-point scale"""
        with open_pdf(data, self.password) as doc:
            if not 0 <= page_index < doc.page_count:
                raise PreconditionViolation(
                    f"Page index {page_index} outside document with {doc.page_count} pages"
                )
            try:
                pix = doc[page_index].get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
                png = pix.tobytes("png")
            except Exception as e:
                logger.error(f"Error rendering page {page_index}: {e}")
                raise RenderFailure(str(e)) from e
            frame = RasterFrame(pix.width, pix.height, scale)
        return RenderedPage(page_index, frame, png)

    def extract_glyph_runs(self, data: bytes) -> List[List[GlyphRun]]:
        """
        Extract text spans as glyph runs, one list per page

        Baselines are converted to document space (y measured up from the
        bottom edge). Whitespace-only spans are skipped.
        """
        pages: List[List[GlyphRun]] = []
        with open_pdf(data, self.password) as doc:
            for page in doc:
                page_height = page.rect.height
                runs: List[GlyphRun] = []
                try:
                    blocks = page.get_text("dict")["blocks"]
                except Exception as e:
                    logger.error(f"Error extracting text from page {page.number}: {e}")
                    raise RenderFailure(str(e)) from e

                for block in blocks:
                    if block.get("type") != 0:
                        continue
                    for line in block.get("lines", []):
                        for span in line.get("spans", []):
                            text = span.get("text", "")
                            if not text.strip():
                                continue
                            origin_x, origin_y = span["origin"]
                            runs.append(GlyphRun(
                                text=text,
                                x=origin_x,
                                y=page_height - origin_y,
                                height=span.get("size", 0.0),
                                page_index=page.number,
                            ))
                pages.append(runs)
        logger.debug(f"Extracted {sum(len(p) for p in pages)} glyph runs from {len(pages)} pages")
        return pages
