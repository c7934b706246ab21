"""Pagination window over an already filtered and sorted list."""
import math
from typing import Sequence, TypeVar

from listing_hub.core.exceptions import ConfigurationError
from listing_hub.schemas.listing_schema import Page

T = TypeVar("T")


def paginate(records: Sequence[T], page_size: int, page_number: int) -> Page:
    """Slice ``records`` into 1-indexed pages of ``page_size``.

    A page past the end comes back empty rather than clamped; callers keep
    their own navigation in range.
    """
    if page_size < 1:
        raise ConfigurationError(f"page_size must be >= 1, got {page_size}")
    if page_number < 1:
        raise ConfigurationError(f"page_number must be >= 1, got {page_number}")

    total = len(records)
    start = (page_number - 1) * page_size
    return Page(
        items=list(records[start:start + page_size]),
        total_pages=math.ceil(total / page_size) if total > 0 else 0,
        total=total,
        page=page_number,
        page_size=page_size,
    )
