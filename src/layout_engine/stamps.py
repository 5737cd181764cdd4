"""
Stamps - Page numbers and watermarks as document-space draw instructions

Placement uses a 3x3 grid of anchors ("top-left" ... "bottom-right")
inset by a margin. Coordinates are document space, so "bottom" is the
small y end of the page.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple
import logging

from .config import CONFIG
from .errors import InvalidInputError
from .geometry import DocumentInfo, PageSize
from .instructions import DrawImage, DrawInstruction, DrawText
from .interfaces import TextMetrics
from .page_range import PageRange
from .styles import DEFAULT_FONT, parse_hex_color, resolve_font

logger = logging.getLogger(__name__)

VERTICAL_ANCHORS = ("top", "middle", "bottom")
HORIZONTAL_ANCHORS = ("left", "center", "right")
POSITIONS = tuple(f"{v}-{h}" for v in VERTICAL_ANCHORS for h in HORIZONTAL_ANCHORS)


def parse_position(position: str) -> Tuple[str, str]:
    """Split 'bottom-center' into ('bottom', 'center')"""
    if position not in POSITIONS:
        raise InvalidInputError(
            f"Unknown position: {position}",
            user_message=f"Position must be one of: {', '.join(POSITIONS)}."
        )
    vertical, horizontal = position.split("-")
    return vertical, horizontal


def anchor_origin(position: str, page: PageSize, box_width: float, box_height: float,
                  margin: float) -> Tuple[float, float]:
    """Bottom-left corner of a box placed at a grid position"""
    vertical, horizontal = parse_position(position)

    if vertical == "top":
        y = page.height - margin - box_height
    elif vertical == "middle":
        y = page.height / 2 - box_height / 2
    else:
        y = margin

    if horizontal == "left":
        x = margin
    elif horizontal == "center":
        x = page.width / 2 - box_width / 2
    else:
        x = page.width - margin - box_width

    return x, y


def format_page_label(template: str, page_number: int, total: int) -> str:
    return template.replace("{page}", str(page_number)).replace("{total}", str(total))


@dataclass
class PageNumberOptions:
    position: str = "bottom-center"
    margin: float = CONFIG.page_number_margin
    template: str = "{page} / {total}"
    font: str = DEFAULT_FONT
    size: float = 12.0
    color: str = "#000000"


def page_number_instructions(document: DocumentInfo, pages: PageRange,
                             options: PageNumberOptions,
                             metrics: TextMetrics) -> List[DrawInstruction]:
    """One label per selected page; numbering uses the page's real position"""
    parse_position(options.position)
    font = resolve_font(options.font)
    color = parse_hex_color(options.color)
    instructions: List[DrawInstruction] = []

    for page_number in pages:
        page_size = document.page_size(page_number - 1)
        label = format_page_label(options.template, page_number, document.page_count)
        width = metrics.text_width(label, font, options.size)
        height = metrics.text_height(font, options.size)
        x, y = anchor_origin(options.position, page_size, width, height, options.margin)
        instructions.append(DrawText(
            page_index=page_number - 1, x=x, y=y, text=label,
            font=font, size=options.size, color=color,
        ))

    logger.debug(f"Prepared {len(instructions)} page labels")
    return instructions


@dataclass
class WatermarkOptions:
    """Either text or image_data must be set; image wins when both are"""
    text: str = "CONFIDENTIAL"
    image_data: Optional[bytes] = None
    image_kind: str = "png"
    image_size: Tuple[float, float] = (0.0, 0.0)
    font: str = "Helvetica-Bold"
    size: float = 72.0
    color: str = "#ff0000"
    opacity: float = 0.5
    rotation: float = -45.0
    position: str = "middle-center"
    tiled: bool = False
    margin: float = CONFIG.watermark_margin
    tile_gap: float = CONFIG.watermark_tile_gap


def _tile_origins(page: PageSize, width: float, height: float, gap: float) -> Iterator[Tuple[float, float]]:
    step_x = width + gap
    step_y = height + gap
    x = 0.0
    while x < page.width + step_x:
        y = 0.0
        while y < page.height + step_y:
            yield x, y
            y += step_y
        x += step_x


def watermark_instructions(document: DocumentInfo, pages: PageRange,
                           options: WatermarkOptions,
                           metrics: TextMetrics) -> List[DrawInstruction]:
    """Stamp the watermark once per page, or tile it across the page"""
    if options.image_data is None and not options.text:
        raise InvalidInputError("Watermark has neither text nor image",
                                user_message="Please enter watermark text or choose an image.")
    if not options.tiled:
        parse_position(options.position)

    font = resolve_font(options.font)
    color = parse_hex_color(options.color)
    if options.image_data is not None:
        width, height = options.image_size
    else:
        width = metrics.text_width(options.text, font, options.size)
        height = metrics.text_height(font, options.size)
    if width <= 0 or height <= 0:
        raise InvalidInputError(f"Watermark has no area: {width}x{height}",
                                user_message="The watermark is empty.")

    def stamp(page_index: int, x: float, y: float) -> DrawInstruction:
        if options.image_data is not None:
            return DrawImage(
                page_index=page_index, x=x, y=y, width=width, height=height,
                data=options.image_data, kind=options.image_kind,
                opacity=options.opacity, rotation=options.rotation,
            )
        return DrawText(
            page_index=page_index, x=x, y=y, text=options.text, font=font,
            size=options.size, color=color, opacity=options.opacity,
            rotation=options.rotation,
        )

    instructions: List[DrawInstruction] = []
    for page_number in pages:
        page_index = page_number - 1
        page_size = document.page_size(page_index)
        if options.tiled:
            for x, y in _tile_origins(page_size, width, height, options.tile_gap):
                instructions.append(stamp(page_index, x, y))
        else:
            x, y = anchor_origin(options.position, page_size, width, height, options.margin)
            instructions.append(stamp(page_index, x, y))

    logger.debug(f"Prepared {len(instructions)} watermark stamps on {len(pages)} pages")
    return instructions
