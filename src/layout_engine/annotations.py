"""
Annotation Model - User edits placed on rendered pages

Edits are recorded in viewer space (pixels of the page raster the user
sees) and flattened into document-space draw instructions once, at save
time. Committed edits are immutable. The one stroke being drawn lives in
an ActiveStroke outside the committed list until its pointer-drag ends.
"""

from dataclasses import dataclass
from enum import Enum
from itertools import groupby
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union
import logging

from .errors import InvalidInputError, PreconditionViolation
from .geometry import CoordinateMapper, DocumentInfo, Point, RasterFrame
from .instructions import DrawImage, DrawInstruction, DrawPath, DrawText
from .styles import DEFAULT_FONT, parse_hex_color, resolve_font

logger = logging.getLogger(__name__)


class ImageKind(Enum):
    PNG = "png"
    JPEG = "jpeg"

    @classmethod
    def from_filename(cls, filename: str) -> "ImageKind":
        suffix = Path(filename).suffix.lower()
        if suffix == ".png":
            return cls.PNG
        if suffix in (".jpg", ".jpeg"):
            return cls.JPEG
        raise InvalidInputError(f"Unsupported image type: {filename}",
                                user_message="Only JPG and PNG images are accepted.")


class EditTool(Enum):
    SELECT = "select"
    TEXT = "text"
    IMAGE = "image"
    DRAW = "draw"


class EditState(Enum):
    IDLE = "idle"
    PLACING = "placing"


@dataclass(frozen=True)
class TextEdit:
    page_index: int
    position: Point  # baseline start
    text: str
    font_family: str = DEFAULT_FONT
    size: float = 16.0
    color: str = "#000000"


@dataclass(frozen=True)
class ImageEdit:
    page_index: int
    position: Point  # top-left corner
    width: float
    height: float
    data: bytes
    kind: ImageKind


@dataclass(frozen=True)
class DrawingEdit:
    page_index: int
    points: Tuple[Point, ...]
    color: str = "#000000"
    stroke_width: float = 2.0


Edit = Union[TextEdit, ImageEdit, DrawingEdit]


class ActiveStroke:
    """The in-progress freehand path; the only edit allowed to grow"""

    def __init__(self, page_index: int, start: Point, color: str, stroke_width: float):
        self.page_index = page_index
        self.points: List[Point] = [start]
        self.color = color
        self.stroke_width = stroke_width

    def append(self, point: Point):
        self.points.append(point)

    def freeze(self) -> DrawingEdit:
        return DrawingEdit(self.page_index, tuple(self.points), self.color, self.stroke_width)


class AnnotationModel:
    """Ordered collection of edits for one editing session"""

    def __init__(self, document: DocumentInfo):
        self.document = document
        self.tool = EditTool.SELECT
        self.stroke_color = "#000000"
        self.stroke_width = 2.0
        self.frames: Dict[int, RasterFrame] = {}
        self._edits: List[Edit] = []
        self._active: Optional[ActiveStroke] = None

    @property
    def state(self) -> EditState:
        return EditState.PLACING if self._active else EditState.IDLE

    @property
    def edits(self) -> Tuple[Edit, ...]:
        """Snapshot of committed edits in insertion order"""
        return tuple(self._edits)

    @property
    def active_stroke(self) -> Optional[DrawingEdit]:
        """Snapshot of the stroke being drawn, for previews"""
        return self._active.freeze() if self._active else None

    def edits_for_page(self, page_index: int) -> List[Edit]:
        return [edit for edit in self._edits if edit.page_index == page_index]

    def attach_frame(self, page_index: int, frame: RasterFrame):
        """Record the raster the user sees for a page"""
        self._check_page(page_index)
        self.frames[page_index] = frame

    def set_tool(self, tool: EditTool):
        # Switching tools ends any drag in progress
        if self._active:
            self.pointer_up()
        self.tool = tool

    def add_text(self, page_index: int, position: Point, text: str,
                 font_family: str = DEFAULT_FONT, size: float = 16.0,
                 color: str = "#000000") -> Optional[TextEdit]:
        """Add a text edit in one action; empty text (cancelled prompt) adds nothing"""
        self._check_page(page_index)
        if not text:
            return None
        edit = TextEdit(page_index, position, text, font_family, size, color)
        self._edits.append(edit)
        return edit

    def add_image(self, page_index: int, position: Point, width: float, height: float,
                  data: bytes, kind: ImageKind) -> ImageEdit:
        self._check_page(page_index)
        edit = ImageEdit(page_index, position, width, height, data, kind)
        self._edits.append(edit)
        return edit

    def pointer_down(self, page_index: int, point: Point) -> bool:
        """Start a stroke if the draw tool is active. Returns True if placing began."""
        if self.tool is not EditTool.DRAW or self._active:
            return False
        self._check_page(page_index)
        self._active = ActiveStroke(page_index, point, self.stroke_color, self.stroke_width)
        return True

    def pointer_move(self, point: Point) -> bool:
        if not self._active:
            return False
        self._active.append(point)
        return True

    def pointer_up(self) -> Optional[DrawingEdit]:
        """Finish the stroke and move it into the committed list"""
        if not self._active:
            return None
        edit = self._active.freeze()
        self._active = None
        self._edits.append(edit)
        logger.debug(f"Committed stroke with {len(edit.points)} points on page {edit.page_index}")
        return edit

    def undo(self) -> Optional[Edit]:
        """Remove the most recently committed edit"""
        if self._active or not self._edits:
            return None
        return self._edits.pop()

    def commit(self) -> List[DrawInstruction]:
        return commit(self.edits, self.document, self.frames)

    def _check_page(self, page_index: int):
        if not 0 <= page_index < self.document.page_count:
            raise PreconditionViolation(
                f"Edit page {page_index} outside document with {self.document.page_count} pages"
            )


def _flatten_edit(edit: Edit, mapper: CoordinateMapper) -> DrawInstruction:
    if isinstance(edit, TextEdit):
        anchor = mapper.point(edit.position)
        return DrawText(
            page_index=edit.page_index,
            x=anchor.x,
            y=anchor.y,
            text=edit.text,
            font=resolve_font(edit.font_family),
            size=mapper.vertical_length(edit.size),
            color=parse_hex_color(edit.color),
        )
    if isinstance(edit, ImageEdit):
        rect = mapper.rect(edit.position, edit.width, edit.height)
        return DrawImage(
            page_index=edit.page_index,
            x=rect.x,
            y=rect.y,
            width=rect.width,
            height=rect.height,
            data=edit.data,
            kind=edit.kind.value,
        )
    if isinstance(edit, DrawingEdit):
        points = tuple((p.x, p.y) for p in map(mapper.point, edit.points))
        return DrawPath(
            page_index=edit.page_index,
            points=points,
            color=parse_hex_color(edit.color),
            width=mapper.length(edit.stroke_width),
        )
    raise PreconditionViolation(f"Unknown edit type: {type(edit).__name__}")


def commit(edits: Sequence[Edit], document: DocumentInfo,
           frames: Mapping[int, RasterFrame]) -> List[DrawInstruction]:
    """
    Flatten edits into document-space draw instructions

    Args:
        edits: Edits in insertion order
        document: Page count and sizes of the target document
        frames: Raster frame each page was shown with, keyed by page index

    Returns:
        Instructions grouped by page, insertion order kept within a page

    Raises:
        PreconditionViolation: For an edit beyond the last page or on a page
            that was never rendered
    """
    for edit in edits:
        if not 0 <= edit.page_index < document.page_count:
            raise PreconditionViolation(
                f"Edit page {edit.page_index} outside document with {document.page_count} pages"
            )

    instructions: List[DrawInstruction] = []
    ordered = sorted(edits, key=lambda e: e.page_index)
    for page_index, page_edits in groupby(ordered, key=lambda e: e.page_index):
        frame = frames.get(page_index)
        if frame is None:
            raise PreconditionViolation(f"No raster frame recorded for page {page_index}")
        mapper = CoordinateMapper(frame, document.page_size(page_index))
        instructions.extend(_flatten_edit(edit, mapper) for edit in page_edits)

    logger.debug(f"Flattened {len(edits)} edits into {len(instructions)} instructions")
    return instructions
