from __future__ import annotations

import logging
import math
from typing import Generic, Sequence, TypeVar

from pagewise.lifecycle.observability import track_page
from pagewise.utils.pagination import OffsetPage

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OffsetPaginator(Generic[T]):
    """Page-number windowing over a point-in-time snapshot.

    Out-of-range requests are clamped rather than rejected: a size below 1
    becomes 1 and a page below 1 becomes 1. There is no conflict detection,
    items may shift between pages if the collection changes between calls.
    """

    def __init__(self, name: str = "collection", max_size: int | None = None) -> None:
        self.name = name
        self.max_size = max_size

    def clamp(self, page: int, size: int) -> tuple[int, int]:
        """Return the (page, size) pair actually served."""
        size = max(1, size)
        if self.max_size is not None:
            size = min(size, self.max_size)
        return max(1, page), size

    def page(self, items: Sequence[T], page: int = 1, size: int = 20) -> OffsetPage[T]:
        page, size = self.clamp(page, size)

        with track_page("offset", self.name, size) as ctx:
            total = len(items)
            total_pages = math.ceil(total / size) if total > 0 else 0
            start = (page - 1) * size
            window = list(items[start:start + size])
            ctx["result_count"] = len(window)

        logger.debug("Offset page %d of %s: %d/%d item(s)", page, self.name, len(window), total)
        return OffsetPage(
            items=window,
            page=page,
            size=size,
            total=total,
            has_next=page * size < total,
            has_prev=page > 1,
            total_pages=total_pages,
        )
