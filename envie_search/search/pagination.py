from __future__ import annotations

import math
from typing import Sequence, TypeVar

from .models import Pagination

T = TypeVar("T")


def paginate(items: Sequence[T], page: int, page_size: int) -> tuple[list[T], Pagination]:
    """Slice *items* for a 1-based *page*; a page past the end is empty, not an error."""
    if page < 1 or page_size < 1:
        raise ValueError("page and page_size must be >= 1")

    start_index = (page - 1) * page_size
    end_index = start_index + page_size
    total = len(items)

    meta = Pagination(
        current_page=page,
        total_pages=math.ceil(total / page_size),
        total_results=total,
        has_more=end_index < total,
        limit=page_size,
    )
    return list(items[start_index:end_index]), meta
