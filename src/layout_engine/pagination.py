"""
Pagination - Slice one tall rendered image into fixed-size pages

Every output page shows the whole scaled image shifted upward by the
heights of the pages before it, so page N sees the window
[N * page_height, (N + 1) * page_height) of the image.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import logging

from .config import CONFIG
from .errors import PreconditionViolation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Placement:
    """Where the image's top edge sits relative to an output page's top edge"""
    page_index: int        # 0-based output page
    vertical_offset: float  # 0 for the first page, then -page_height per page


def scaled_image_height(raster_height: float, raster_width: float, page_width: float) -> float:
    """Height of the raster once fit to the page width"""
    if raster_width <= 0 or page_width <= 0:
        raise PreconditionViolation(
            f"Cannot fit raster of width {raster_width} to page width {page_width}"
        )
    return raster_height * (page_width / raster_width)


def paginate(raster_height: float, raster_width: float, page_width: float,
             page_height: float, epsilon: Optional[float] = None) -> List[Placement]:
    """
    Compute the placements that tile a tall raster across output pages

    Args:
        raster_height: Raster height in pixels
        raster_width: Raster width in pixels
        page_width: Output page width in document units
        page_height: Output page height in document units
        epsilon: Residue below which no further page is started

    Returns:
        One Placement per output page, in page order

    Raises:
        PreconditionViolation: For a zero-width raster or page, or a page with no height
    """
    if page_height <= 0:
        raise PreconditionViolation(f"Page height must be positive, got {page_height}")
    tolerance = CONFIG.pagination_epsilon if epsilon is None else epsilon
    scaled_height = scaled_image_height(raster_height, raster_width, page_width)

    placements = [Placement(0, 0.0)]
    page = 0
    # Recomputed from the page count rather than decremented, so residue does not accumulate
    remaining = scaled_height - page_height
    while remaining > tolerance:
        page += 1
        placements.append(Placement(page, -page * page_height))
        remaining = scaled_height - (page + 1) * page_height

    logger.debug(
        f"Paginated {raster_width}x{raster_height}px raster (scaled height {scaled_height:.2f}) "
        f"into {len(placements)} pages of {page_height:.2f}"
    )
    return placements


def visible_window(placement: Placement, scaled_height: float,
                   page_height: float) -> Tuple[float, float]:
    """
    Part of the scaled image visible on a placement's page

    Returns:
        (top, bottom) in scaled image units; top == bottom if nothing is visible
    """
    top = min(max(-placement.vertical_offset, 0.0), scaled_height)
    bottom = min(top + page_height, scaled_height)
    return top, bottom
