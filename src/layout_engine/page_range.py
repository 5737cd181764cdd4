"""
Page Range Parser - Parse and validate page selections like "1, 3-5, 8"
Used by every tool that operates on a subset of pages.
"""

from dataclasses import dataclass
from typing import Iterator, List, Set, Tuple
import logging

from .errors import PageRangeError, RangeErrorReason

logger = logging.getLogger(__name__)

ALL_PAGES_KEYWORD = "all"


@dataclass(frozen=True)
class PageRange:
    """Validated, deduplicated, ascending list of 1-based page numbers"""

    pages: Tuple[int, ...]

    def __iter__(self) -> Iterator[int]:
        return iter(self.pages)

    def __len__(self) -> int:
        return len(self.pages)

    def __contains__(self, page_number: object) -> bool:
        return page_number in self.pages

    def to_indices(self) -> List[int]:
        """Return the selection as 0-based page indices"""
        return [page - 1 for page in self.pages]


def _parse_int(token: str, source: str) -> int:
    try:
        return int(token.strip())
    except ValueError:
        raise PageRangeError(RangeErrorReason.SYNTAX, f"Not a page number: '{token}' in '{source}'")


def _expand_token(token: str, max_page: int) -> range:
    """Expand one comma-separated token into the pages it covers"""
    if "-" in token:
        start_text, end_text = token.split("-", 1)
        start = _parse_int(start_text, token)
        end = _parse_int(end_text, token)
        if start > end:
            raise PageRangeError(RangeErrorReason.SYNTAX, f"Start page {start} is after end page {end}")
    else:
        start = end = _parse_int(token, token)

    if start < 1 or end > max_page:
        raise PageRangeError(
            RangeErrorReason.OUT_OF_RANGE,
            f"Pages {start}-{end} fall outside 1-{max_page}"
        )
    return range(start, end + 1)


def parse_page_range(text: str, max_page: int) -> PageRange:
    """
    Parse a textual page selection

    Args:
        text: Comma-separated page numbers and ranges, or "all"
        max_page: Number of pages in the document

    Returns:
        PageRange with ascending, distinct page numbers

    Raises:
        PageRangeError: If any token is invalid; no partial result is produced
    """
    stripped = (text or "").strip()
    if not stripped:
        raise PageRangeError(RangeErrorReason.EMPTY, "Page range is empty")

    if stripped.lower() == ALL_PAGES_KEYWORD:
        if max_page < 1:
            raise PageRangeError(RangeErrorReason.EMPTY, "Document has no pages")
        return PageRange(tuple(range(1, max_page + 1)))

    selected: Set[int] = set()
    for token in stripped.split(","):
        selected.update(_expand_token(token, max_page))

    pages = tuple(sorted(selected))
    logger.debug(f"Parsed page range '{stripped}' -> {pages}")
    return PageRange(pages)
