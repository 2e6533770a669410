"""Offset/limit pagination helpers shared by the listing services."""

import math
from typing import Optional, Tuple


def is_paginated(limit: Optional[int], offset: Optional[int]) -> bool:
    """Listings only switch to the paginated envelope when asked to.

    A zero limit and offset count as not asking.
    """
    return bool(limit) or bool(offset)


def resolve_page(limit: Optional[int], offset: Optional[int], default_limit: int = 12, max_limit: int = 50) -> Tuple[int, int, int]:
    """Return `(page, limit, offset)` normalised from caller values.

    The page is derived from the raw offset and limit (falling back to a
    divisor of 10), the limit is clamped to `1..max_limit` and the offset
    is recomputed from the page so results always align to page
    boundaries.
    """
    raw_offset = max(0, offset or 0)
    page = max(1, raw_offset // (limit or 10) + 1)
    limit = min(max_limit, max(1, limit or default_limit))
    return page, limit, (page - 1) * limit


def envelope(key: str, items: list, total: int, page: int, limit: int) -> dict:
    return {
        key: items,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }
