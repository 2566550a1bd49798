from __future__ import annotations

import math

from alumnisearch.core.models import ELLIPSIS, PageEntry


def total_pages(page_size: int, total_count: int) -> int:
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    return max(1, math.ceil(max(0, total_count) / page_size))


def page_window(current_page: int, page_size: int, total_count: int, radius: int = 2) -> list[PageEntry]:
    """Page numbers to offer for navigation, gaps collapsed to one ELLIPSIS.

    Page 1 and the last page are always present; so is every page within
    ``radius`` of ``current_page``. A single page yields ``[1]``.
    """
    last = total_pages(page_size, total_count)
    if last <= 1:
        return [1]

    window: list[PageEntry] = []
    previous: int | None = None
    for page in range(1, last + 1):
        if page != 1 and page != last and abs(page - current_page) > radius:
            continue
        if previous is not None and page != previous + 1:
            window.append(ELLIPSIS)
        window.append(page)
        previous = page
    return window
