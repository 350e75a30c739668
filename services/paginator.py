"""Fixed-size paging over the reverse-chronological bucket list."""

from __future__ import annotations

import math
from typing import Sequence

from models.records import Bucket, Page

DEFAULT_PAGE_SIZE = 10


def total_pages_for(item_count: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError("Page size must be a positive integer.")
    return max(1, math.ceil(item_count / page_size))


def converge_page(page: int, total_pages: int) -> int:
    """Return the page a stateful caller should hold once ``total_pages`` is known.

    Only pages past the end are pulled back; everything else is left for
    :func:`paginate` to clamp at render time.
    """
    return total_pages if page > total_pages else page


def paginate(
    buckets: Sequence[Bucket],
    page_size: int = DEFAULT_PAGE_SIZE,
    requested_page: int = 1,
) -> Page:
    total_pages = total_pages_for(len(buckets), page_size)
    current_page = min(max(1, requested_page), total_pages)
    start = (current_page - 1) * page_size
    return Page(
        rows=list(buckets[start:start + page_size]),
        current_page=current_page,
        total_pages=total_pages,
    )
