from __future__ import annotations

import hashlib
import math
from bisect import bisect_left
from dataclasses import dataclass, field
from typing import Any, Generic, Iterable, TypeVar

import bson

from pagewise.utils.types import Position, SortKey, as_position

T = TypeVar("T")

# BSON int64, the widest integer a continuation token carries
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class Snapshot(Generic[T]):
    """Sorted, point-in-time copy of a collaborator collection.

    Items are held in ascending key order. Keys must be unique so the
    order is total and every position names exactly one item.
    """

    items: tuple[T, ...]
    keys: tuple[Position, ...]
    # prefixes[n] is the digest of keys[:n]
    prefixes: tuple[str, ...] = field(repr=False, compare=False)

    @classmethod
    def take(cls, items: Iterable[T], key: SortKey) -> Snapshot[T]:
        """Materialize and sort an iterable.

        Args:
            items: Collection contents as read from the collaborator
            key: Callable returning the sort key (primary key plus tiebreak)

        Raises:
            ValueError: If two items share a key, or a key holds a part a
                continuation token cannot carry
        """
        pairs = sorted(((_checked(as_position(key(item))), item) for item in items), key=lambda p: p[0])
        keys = tuple(k for k, _ in pairs)
        for prev, cur in zip(keys, keys[1:]):
            if prev == cur:
                raise ValueError(f"Duplicate sort key {cur!r}: the order must be total")

        digest = hashlib.blake2b(digest_size=12)
        prefixes = [digest.hexdigest()]
        for position in keys:
            digest.update(_encode_key(position))
            prefixes.append(digest.hexdigest())
        return cls(items=tuple(item for _, item in pairs), keys=keys, prefixes=tuple(prefixes))

    def __len__(self) -> int:
        return len(self.items)

    def locate(self, position: Position) -> int | None:
        """Return the index of the item at exactly this position, or None."""
        try:
            index = bisect_left(self.keys, position)
        except TypeError:
            # position from a collection with differently typed keys
            return None
        if index < len(self.keys) and self.keys[index] == position:
            return index
        return None

    def fingerprint(self, end: int) -> str:
        """Digest of the ordering keys in [0, end).

        Any removal, insertion or reordering inside the prefix changes the
        digest; anything appended after it does not.
        """
        return self.prefixes[min(max(end, 0), len(self.keys))]


def _checked(position: Position) -> Position:
    if not position:
        raise ValueError("Empty sort key")
    for part in position:
        if isinstance(part, bool) or not isinstance(part, (str, int, float)):
            raise ValueError(f"Sort key part {part!r} in {position!r} must be a str, int or float")
        if isinstance(part, int) and not _INT64_MIN <= part <= _INT64_MAX:
            raise ValueError(f"Sort key part {part!r} in {position!r} is outside the int64 range")
        if isinstance(part, float) and math.isnan(part):
            raise ValueError(f"Sort key {position!r} holds NaN")
    return position


def _encode_key(position: Position) -> bytes:
    return bson.encode({"k": list(position)})


def key_of(*fields: str) -> SortKey:
    """Build a sort key reading the named attributes (or mapping keys) of an item.

    Example: key_of("sequence", "job_id")
    """

    def _key(item: Any) -> Position:
        if isinstance(item, dict):
            return tuple(item[f] for f in fields)
        return tuple(getattr(item, f) for f in fields)

    return _key
