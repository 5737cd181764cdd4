"""
Coordinate mapping between viewer space and document space.

Viewer space is the pixel grid of a rendered page raster: origin top-left,
y grows downward. Document space is the page description: origin
bottom-left, y grows upward, measured in points.
"""

from dataclasses import dataclass
from typing import Tuple

from .errors import PreconditionViolation


@dataclass(frozen=True)
class Point:
    """A point in viewer space (pixels)"""
    x: float
    y: float


@dataclass(frozen=True)
class DocumentPoint:
    """A point in document space (points, y up)"""
    x: float
    y: float


@dataclass(frozen=True)
class DocumentRect:
    """Axis-aligned rectangle in document space anchored at its bottom-left corner"""
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class PageSize:
    width: float
    height: float


@dataclass(frozen=True)
class RasterFrame:
    """
    Pixel dimensions of one rendered page.

    Attributes:
        width: Raster width in pixels
        height: Raster height in pixels
        scale: Nominal pixels per document unit used when rendering
    """
    width: int
    height: int
    scale: float = 1.0


@dataclass(frozen=True)
class DocumentInfo:
    """Page count and per-page sizes, discovered once at load time"""
    page_sizes: Tuple[PageSize, ...]

    @property
    def page_count(self) -> int:
        return len(self.page_sizes)

    def page_size(self, page_index: int) -> PageSize:
        if not 0 <= page_index < self.page_count:
            raise PreconditionViolation(
                f"Page index {page_index} outside document with {self.page_count} pages"
            )
        return self.page_sizes[page_index]


def _scales(frame: RasterFrame, page_size: PageSize) -> Tuple[float, float]:
    if frame.width <= 0 or frame.height <= 0:
        raise PreconditionViolation(f"Raster frame has no area: {frame.width}x{frame.height}")
    # Raster dimensions are rounded, so each axis gets its own factor
    return page_size.width / frame.width, page_size.height / frame.height


def to_document_space(point: Point, frame: RasterFrame, page_size: PageSize) -> DocumentPoint:
    """Map a point-like anchor (text baseline, stroke vertex) to document space"""
    scale_x, scale_y = _scales(frame, page_size)
    return DocumentPoint(point.x * scale_x, page_size.height - point.y * scale_y)


def to_viewer_space(point: DocumentPoint, frame: RasterFrame, page_size: PageSize) -> Point:
    """Inverse of to_document_space"""
    scale_x, scale_y = _scales(frame, page_size)
    return Point(point.x / scale_x, (page_size.height - point.y) / scale_y)


def rect_to_document_space(top_left: Point, width: float, height: float,
                           frame: RasterFrame, page_size: PageSize) -> DocumentRect:
    """
    Map a rectangle given by its top-left corner and size in viewer space.

    The vertical anchor drops by the mapped height because the document
    rectangle is anchored at its bottom-left corner.
    """
    scale_x, scale_y = _scales(frame, page_size)
    doc_height = height * scale_y
    return DocumentRect(
        x=top_left.x * scale_x,
        y=page_size.height - top_left.y * scale_y - doc_height,
        width=width * scale_x,
        height=doc_height,
    )


class CoordinateMapper:
    """Bundles one page's raster frame and page size"""

    def __init__(self, frame: RasterFrame, page_size: PageSize):
        self.frame = frame
        self.page_size = page_size
        self.scale_x, self.scale_y = _scales(frame, page_size)

    def point(self, point: Point) -> DocumentPoint:
        return to_document_space(point, self.frame, self.page_size)

    def rect(self, top_left: Point, width: float, height: float) -> DocumentRect:
        return rect_to_document_space(top_left, width, height, self.frame, self.page_size)

    def length(self, viewer_length: float) -> float:
        """Map a direction-free length (stroke width) using the mean scale"""
        return viewer_length * (self.scale_x + self.scale_y) / 2.0

    def vertical_length(self, viewer_length: float) -> float:
        """Map a vertical length such as a font size"""
        return viewer_length * self.scale_y

    def to_viewer(self, point: DocumentPoint) -> Point:
        return to_viewer_space(point, self.frame, self.page_size)
