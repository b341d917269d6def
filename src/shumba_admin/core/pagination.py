"""Local pagination helpers for client-side record lists."""

import math
from typing import List, Sequence, TypeVar

T = TypeVar("T")


def total_pages(count: int, page_size: int) -> int:
    """Return the number of pages for ``count`` items, never less than 1."""
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")
    return max(1, math.ceil(count / page_size))


def paginate(items: Sequence[T], page: int, page_size: int) -> List[T]:
    """
    Return the 1-based ``page`` slice of ``items``.

    Pages past the end (or a collection smaller than one page) yield fewer
    items, possibly none. Never raises for out-of-range pages.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")
    if page < 1:
        return []
    start = (page - 1) * page_size
    return list(items[start:start + page_size])


def clamp_page(current_page: int, pages: int) -> int:
    """Clamp ``current_page`` back into ``[1, max(1, pages)]``."""
    upper = max(1, pages)
    if current_page > upper:
        return upper
    if current_page < 1:
        return 1
    return current_page
