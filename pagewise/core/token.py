"""Continuation tokens for cursor pagination.

A token names the last item a client received (its ``position``, the item's
sort key) together with a ``generation`` stamp: a fingerprint of the
collection's ordering keys up to and including that item. The paginator uses
the stamp to tell harmless growth after the position apart from changes that
would make "resume after here" skip or repeat items.

Wire format: a BSON document ``{"v": 1, "p": [...] | None, "g": "<hex>"}``
followed by a 4-byte blake2b checksum, encoded as unpadded URL-safe base64.
The checksum catches truncation and typos, it is not a signature.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import re
from dataclasses import dataclass
from typing import Any

import bson
from bson.errors import BSONError

from pagewise.utils.exceptions import InvalidToken
from pagewise.utils.types import Position

TOKEN_VERSION = 1
_CHECKSUM_SIZE = 4
_TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_GENERATION_RE = re.compile(r"^[0-9a-f]+$")


@dataclass(frozen=True)
class ContinuationToken:
    """Decoded continuation token. Never mutated once issued."""

    position: Position | None
    generation: str

    def encode(self) -> str:
        return encode(self.position, self.generation)


def _checksum(payload: bytes) -> bytes:
    return hashlib.blake2b(payload, digest_size=_CHECKSUM_SIZE).digest()


def encode(position: Position | None, generation: str) -> str:
    """Encode a position and generation into a URL-safe token string.

    Args:
        position: Sort key of the last returned item, or None for the start
        generation: Fingerprint of the collection prefix ending at position

    Returns:
        Token made of [A-Za-z0-9_-] only
    """
    payload = bson.encode(
        {
            "v": TOKEN_VERSION,
            "p": list(position) if position is not None else None,
            "g": generation,
        }
    )
    raw = payload + _checksum(payload)
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def decode(text: str | None) -> ContinuationToken | None:
    """Decode a token string.

    Args:
        text: Token as received from the client

    Returns:
        The decoded token, or None when text is None or empty (first page)

    Raises:
        InvalidToken: If the token is malformed or fails its checksum
    """
    if text is None or text == "":
        return None

    if not _TOKEN_RE.match(text):
        raise InvalidToken("Continuation token contains invalid characters", value=text)

    try:
        raw = base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))
    except (binascii.Error, ValueError) as e:
        raise InvalidToken(f"Continuation token is not valid base64: {e}", value=text) from e

    if len(raw) <= _CHECKSUM_SIZE:
        raise InvalidToken("Continuation token is truncated", value=text)

    payload, checksum = raw[:-_CHECKSUM_SIZE], raw[-_CHECKSUM_SIZE:]
    if _checksum(payload) != checksum:
        raise InvalidToken("Continuation token checksum mismatch", value=text)

    try:
        document = bson.decode(payload)
    except BSONError as e:
        raise InvalidToken(f"Continuation token payload is unreadable: {e}", value=text) from e

    return _from_document(document, text)


def _from_document(document: dict[str, Any], text: str) -> ContinuationToken:
    """Validate the decoded document structure."""
    if set(document) != {"v", "p", "g"}:
        raise InvalidToken("Continuation token has an unexpected structure", value=text)
    if document["v"] != TOKEN_VERSION:
        raise InvalidToken(f"Unsupported continuation token version {document['v']!r}", value=text)

    generation = document["g"]
    if not isinstance(generation, str) or not _GENERATION_RE.match(generation):
        raise InvalidToken("Continuation token generation is malformed", value=text)

    raw_position = document["p"]
    if raw_position is None:
        return ContinuationToken(position=None, generation=generation)
    if not isinstance(raw_position, list) or not raw_position:
        raise InvalidToken("Continuation token position is malformed", value=text)

    parts = []
    for part in raw_position:
        if isinstance(part, bool) or not isinstance(part, (str, int, float)):
            raise InvalidToken("Continuation token position is malformed", value=text)
        parts.append(int(part) if isinstance(part, int) else part)
    return ContinuationToken(position=tuple(parts), generation=generation)
