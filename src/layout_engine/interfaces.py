"""
Collaborator contracts.

The engine never imports a PDF or word-processing library directly; the
tool functions receive objects satisfying these protocols. The PyMuPDF
and python-docx implementations live in the pdf_processor package.
"""

from dataclasses import dataclass
from typing import List, Protocol, Sequence, Tuple

from .geometry import DocumentInfo, PageSize, RasterFrame
from .instructions import DrawInstruction
from .layout import GlyphRun
from .page_range import PageRange
from .pagination import Placement


@dataclass(frozen=True)
class RenderedPage:
    """One page raster as PNG bytes plus its frame"""
    page_index: int
    frame: RasterFrame
    png: bytes


@dataclass(frozen=True)
class RasterImage:
    """A rendered bitmap of arbitrary height"""
    frame: RasterFrame
    png: bytes


class TextMetrics(Protocol):
    def text_width(self, text: str, font: str, size: float) -> float: ...

    def text_height(self, font: str, size: float) -> float: ...


class DocumentRenderer(Protocol):
    def describe(self, data: bytes) -> DocumentInfo: ...

    def render_page(self, data: bytes, page_index: int, scale: float) -> RenderedPage: ...

    def extract_glyph_runs(self, data: bytes) -> List[List[GlyphRun]]: ...


class MarkupConverter(Protocol):
    def to_markup(self, data: bytes) -> str: ...


class MarkupRenderer(Protocol):
    def render_markup(self, markup: str, width: float) -> RasterImage: ...


class DocumentEncoder(TextMetrics, Protocol):
    def image_size(self, data: bytes) -> Tuple[int, int]: ...

    def page_count(self, data: bytes) -> int: ...

    def apply_instructions(self, data: bytes, instructions: Sequence[DrawInstruction]) -> bytes: ...

    def build_from_raster(self, raster: RasterImage, placements: Sequence[Placement],
                          page_size: PageSize) -> bytes: ...

    def extract_pages(self, data: bytes, page_range: PageRange) -> bytes: ...
