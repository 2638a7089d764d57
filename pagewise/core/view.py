from __future__ import annotations

import asyncio
from typing import Any, Callable, Generic, Iterable, TypeVar

from pagewise.core.cursor import CursorPaginator
from pagewise.core.offset import OffsetPaginator
from pagewise.core.snapshot import Snapshot
from pagewise.utils.pagination import OffsetPage, PageResult
from pagewise.utils.types import DEFAULT_PAGE_SIZE, Predicate, SortKey

T = TypeVar("T")

Source = Callable[[], Any]


async def maybe_await(result: Any) -> Any:
    """Await result if the collaborator handed back a coroutine."""
    if asyncio.iscoroutine(result):
        return await result
    return result


class CollectionView(Generic[T]):
    """Fluent, lazy, immutable view over a collaborator-owned collection.

    Each chainable method returns a new CollectionView. The source is only
    read when a terminal method is called, once per call.
    """

    def __init__(
        self,
        source: Source,
        key: SortKey,
        name: str = "collection",
        predicates: list[Predicate] | None = None,
        max_size: int | None = None,
    ) -> None:
        self._source = source
        self._key = key
        self._name = name
        self._predicates: list[Predicate] = predicates or []
        self._max_size = max_size

    def _clone(self, **overrides: Any) -> CollectionView[T]:
        """Return a new CollectionView with merged overrides."""
        defaults = {
            "source": self._source,
            "key": self._key,
            "name": self._name,
            "predicates": self._predicates.copy(),
            "max_size": self._max_size,
        }
        defaults.update(overrides)
        return CollectionView(**defaults)

    @property
    def name(self) -> str:
        return self._name

    # --- Chainable methods ---

    def filter(self, predicate: Predicate) -> CollectionView[T]:
        """Keep only items for which predicate returns True. Predicates combine with AND."""
        return self._clone(predicates=self._predicates + [predicate])

    def order_by(self, key: SortKey) -> CollectionView[T]:
        """Replace the sort key. The key must be unique per item."""
        return self._clone(key=key)

    def named(self, name: str) -> CollectionView[T]:
        return self._clone(name=name)

    # --- Terminal methods ---

    async def snapshot(self) -> Snapshot[T]:
        """Read the source once and return the sorted snapshot."""
        raw: Iterable[T] = await maybe_await(self._source())
        if self._predicates:
            raw = [item for item in raw if all(p(item) for p in self._predicates)]
        return Snapshot.take(raw, self._key)

    async def all(self) -> list[T]:
        return list((await self.snapshot()).items)

    async def first(self) -> T | None:
        """Return the first item in order, or None."""
        snap = await self.snapshot()
        return snap.items[0] if snap.items else None

    async def count(self) -> int:
        return len(await self.snapshot())

    # --- Pagination ---

    async def paginate(self, page: int = 1, size: int = DEFAULT_PAGE_SIZE) -> OffsetPage[T]:
        """Offset-based pagination. Returns an OffsetPage with items and metadata."""
        snap = await self.snapshot()
        return OffsetPaginator(self._name, max_size=self._max_size).page(snap.items, page, size)

    async def cursor_paginate(self, limit: int, token: str | None = None) -> PageResult[T]:
        """Cursor-based pagination resuming after token."""
        snap = await self.snapshot()
        return CursorPaginator(self._name).fetch_page(snap, limit, token)

    # --- Async iteration ---

    async def __aiter__(self):
        for item in (await self.snapshot()).items:
            yield item
