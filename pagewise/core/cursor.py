from __future__ import annotations

import logging
from typing import Generic, TypeVar

from pagewise.core import token as tokens
from pagewise.core.snapshot import Snapshot
from pagewise.lifecycle.observability import track_page
from pagewise.utils.exceptions import PaginationConflict, ValidationError
from pagewise.utils.pagination import PageResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CursorPaginator(Generic[T]):
    """Continuation-token windowing over collections that change between requests.

    Resuming is optimistic: the token's generation is checked against the
    snapshot before its position is trusted. Growth after the position is
    tolerated; anything that moves or removes the position or an item before
    it raises PaginationConflict.
    """

    def __init__(self, name: str = "collection") -> None:
        self.name = name

    def fetch_page(self, snapshot: Snapshot[T], limit: int, token: str | None = None) -> PageResult[T]:
        """Return up to ``limit`` items following ``token``.

        Args:
            snapshot: Point-in-time view of the collection
            limit: Maximum number of items, 0 allowed
            token: Token from the previous page, or None for the first page

        Raises:
            ValidationError: If limit is negative
            InvalidToken: If token is malformed
            PaginationConflict: If token no longer resolves against snapshot
        """
        if limit < 0:
            raise ValidationError(f"limit must be >= 0, got {limit}", value=limit)

        resume = tokens.decode(token)

        with track_page("cursor", self.name, limit) as ctx:
            start = self._resolve_start(snapshot, resume)
            stop = min(start + limit, len(snapshot))
            items = list(snapshot.items[start:stop])
            ctx["result_count"] = len(items)

            next_token = None
            if stop < len(snapshot):
                if stop > start:
                    position = snapshot.keys[stop - 1]
                else:
                    # nothing taken: resume from the same place
                    position = resume.position if resume is not None else None
                next_token = tokens.encode(position, snapshot.fingerprint(stop))

        logger.debug(
            "Cursor page of %s: %d item(s) from index %d, more=%s",
            self.name,
            len(items),
            start,
            next_token is not None,
        )
        return PageResult(items=items, limit=limit, next_token=next_token)

    def _resolve_start(self, snapshot: Snapshot[T], resume: tokens.ContinuationToken | None) -> int:
        """Verify the token against the snapshot and return the start index."""
        if resume is None or resume.position is None:
            return 0

        index = snapshot.locate(resume.position)
        if index is None:
            raise PaginationConflict(
                f"Continuation position no longer exists in {self.name}; restart paging"
            )
        if snapshot.fingerprint(index + 1) != resume.generation:
            raise PaginationConflict(
                f"{self.name} changed before the continuation position; restart paging"
            )
        return index + 1
