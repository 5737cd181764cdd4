"""
Layout Reconstruction - Regroup positioned text fragments into paragraphs

Text extraction reports glyph runs in arbitrary order with a baseline
position. Runs are put into reading order (top of page first, left to
right within a line) and split into paragraphs wherever the vertical gap
to the previous run is larger than normal line leading.

This is a heuristic: dense single-spaced text may under-split and sparse
layouts may over-split.
"""

from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Iterable, List, Optional, Sequence, Union
import logging
import re

from .config import CONFIG

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
# C0 controls other than tab, newline and carriage return are not valid in XML
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


@dataclass(frozen=True)
class GlyphRun:
    """Text fragment with its baseline start in document units (y up)"""
    text: str
    x: float
    y: float
    height: float
    page_index: int = 0


@dataclass
class PageText:
    page_number: int  # 1-based
    paragraphs: List[str] = field(default_factory=list)


class PageBreak:
    """Marker separating consecutive pages in reconstructed output"""

    def __repr__(self) -> str:
        return "PAGE_BREAK"


PAGE_BREAK = PageBreak()

LayoutItem = Union[PageText, PageBreak]


def strip_control_chars(text: str) -> str:
    return _CONTROL_CHARS.sub("", text)


def _normalize_paragraph(text: str) -> str:
    return _WHITESPACE.sub(" ", strip_control_chars(text)).strip()


def reading_order(runs: Iterable[GlyphRun], line_tolerance: Optional[float] = None) -> List[GlyphRun]:
    """Sort runs top-to-bottom, left-to-right within a line"""
    tolerance = CONFIG.same_line_tolerance if line_tolerance is None else line_tolerance

    def compare(a: GlyphRun, b: GlyphRun) -> int:
        if abs(a.y - b.y) < tolerance:
            return (a.x > b.x) - (a.x < b.x)
        return (a.y < b.y) - (a.y > b.y)

    return sorted(runs, key=cmp_to_key(compare))


def group_lines(runs: Iterable[GlyphRun], line_tolerance: Optional[float] = None) -> List[List[GlyphRun]]:
    """Group runs whose baselines sit within the tolerance of the line's first run"""
    tolerance = CONFIG.same_line_tolerance if line_tolerance is None else line_tolerance
    lines: List[List[GlyphRun]] = []
    for run in reading_order(runs, tolerance):
        if lines and abs(lines[-1][0].y - run.y) < tolerance:
            lines[-1].append(run)
        else:
            lines.append([run])
    return lines


def reconstruct_page(runs: Sequence[GlyphRun], line_tolerance: Optional[float] = None,
                     gap_factor: Optional[float] = None) -> List[str]:
    """
    Reconstruct the paragraphs of a single page

    Args:
        runs: Glyph runs of one page, any order
        line_tolerance: Baseline difference below which runs share a line
        gap_factor: Multiple of the paragraph's tallest run that starts a new paragraph

    Returns:
        Paragraph strings in reading order; empty for a page without runs
    """
    if not runs:
        return []
    factor = CONFIG.paragraph_gap_factor if gap_factor is None else gap_factor

    paragraphs: List[str] = []
    current = ""
    last_y: Optional[float] = None
    last_height = 0.0

    for run in reading_order(runs, line_tolerance):
        if last_y is not None and last_y - run.y > last_height * factor:
            paragraphs.append(_normalize_paragraph(current))
            current = ""
            last_height = 0.0
        current += run.text + " "
        last_y = run.y
        last_height = max(last_height, run.height)

    paragraphs.append(_normalize_paragraph(current))
    return paragraphs


def reconstruct(glyph_runs: Sequence[Sequence[GlyphRun]],
                line_tolerance: Optional[float] = None,
                gap_factor: Optional[float] = None) -> List[LayoutItem]:
    """
    Reconstruct paragraphs for every page

    Args:
        glyph_runs: One list of runs per source page, in page order

    Returns:
        PageText entries in page order with PAGE_BREAK between consecutive pages
    """
    items: List[LayoutItem] = []
    for index, runs in enumerate(glyph_runs):
        if index:
            items.append(PAGE_BREAK)
        paragraphs = reconstruct_page(runs, line_tolerance, gap_factor)
        items.append(PageText(page_number=index + 1, paragraphs=paragraphs))
        logger.debug(f"Page {index + 1}: {len(runs)} runs -> {len(paragraphs)} paragraphs")
    return items


def pages_of(items: Iterable[LayoutItem]) -> List[PageText]:
    """Drop page-break markers"""
    return [item for item in items if isinstance(item, PageText)]
