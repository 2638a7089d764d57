from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class OffsetPage(Generic[T]):
    """Offset-based pagination result over a point-in-time snapshot."""

    items: list[T]
    page: int
    size: int
    total: int
    has_next: bool
    has_prev: bool
    total_pages: int

    @property
    def next_page(self) -> int | None:
        return self.page + 1 if self.has_next else None

    @property
    def prev_page(self) -> int | None:
        return self.page - 1 if self.has_prev else None

    def map(self, fn: Callable[[T], Any]) -> OffsetPage[Any]:
        """Return a copy with every item converted by fn."""
        return replace(self, items=[fn(item) for item in self.items])


@dataclass(frozen=True)
class PageResult(Generic[T]):
    """Cursor-based pagination result with an optional continuation token."""

    items: list[T]
    limit: int
    next_token: str | None

    @property
    def has_next(self) -> bool:
        return self.next_token is not None

    def map(self, fn: Callable[[T], Any]) -> PageResult[Any]:
        """Return a copy with every item converted by fn."""
        return replace(self, items=[fn(item) for item in self.items])
