from pagewise.core.snapshot import Snapshot, key_of
from pagewise.core.token import ContinuationToken, encode, decode
from pagewise.core.cursor import CursorPaginator
from pagewise.core.offset import OffsetPaginator
from pagewise.core.links import LinkBuilder
from pagewise.core.envelope import PageInfo, PageDesc, CursorEnvelope, OffsetEnvelope
from pagewise.core.view import CollectionView, maybe_await

__all__ = [
    "Snapshot",
    "key_of",
    "ContinuationToken",
    "encode",
    "decode",
    "CursorPaginator",
    "OffsetPaginator",
    "LinkBuilder",
    "PageInfo",
    "PageDesc",
    "CursorEnvelope",
    "OffsetEnvelope",
    "CollectionView",
    "maybe_await",
]
