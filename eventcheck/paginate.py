import math
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class Page:
    """One slice of an ordered result set."""

    items: list
    total_pages: int
    start_index: int

    @property
    def end_index(self):
        """Index one past the last item on this page."""
        return self.start_index + len(self.items)


def total_pages(count: int, page_size: int) -> int:
    """Number of pages needed for `count` items; 0 when there are none."""
    if page_size < 1:
        raise ValueError(f"page_size must be at least 1, got {page_size}")
    return math.ceil(count / page_size)


def clamp_page(page: int, pages: int) -> int:
    """Clamps `page` to `[1, max(1, pages)]`."""
    return min(max(1, page), max(1, pages))


def paginate(sequence: Sequence, page: int, page_size: int) -> Page:
    """
    Slices an ordered sequence into a fixed-size page.

    The page is not corrected here: callers clamp it with `clamp_page` first. A page past
    the end yields no items, and slicing never wraps around.

    Args:
        sequence (Sequence): Ordered items to paginate.
        page (int): 1-based page number.
        page_size (int): Items per page.

    Returns:
        Page: Items on the page, the total page count and the index of the first item.

    Raises:
        ValueError: If `page` or `page_size` is less than 1.
    """
    if page < 1:
        raise ValueError(f"page must be at least 1, got {page}")
    pages = total_pages(len(sequence), page_size)
    start_index = (page - 1) * page_size
    items = list(sequence[start_index : start_index + page_size])
    return Page(items=items, total_pages=pages, start_index=start_index)
