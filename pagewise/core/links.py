from __future__ import annotations

import logging
from typing import Any, Sequence
from urllib.parse import SplitResult, quote, urlencode, urlsplit, urlunsplit

from pagewise.utils.exceptions import LinkError

logger = logging.getLogger(__name__)

LIMIT_PARAM = "limit"
TOKEN_PARAM = "continuationToken"
PAGE_PARAM = "page"
SIZE_PARAM = "size"


class LinkBuilder:
    """Builds absolute navigation links from the request's base URI.

    Parameters are appended in the order given, so links are reproducible:
    cursor links use ``limit`` then ``continuationToken``, offset links use
    ``page`` then ``size``.

    ``build`` raises LinkError for an unusable base. ``link`` and the helpers
    built on it return None instead, since a missing navigation link is safer
    than a wrong one.
    """

    def __init__(self, base_uri: str | None) -> None:
        self.base_uri = base_uri

    def _split_base(self) -> SplitResult:
        if not self.base_uri:
            raise LinkError("No base URI to build links from")
        try:
            parts = urlsplit(self.base_uri)
            parts.port  # validates the port
        except ValueError as e:
            raise LinkError(f"Unparsable base URI {self.base_uri!r}: {e}") from e
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise LinkError(f"Base URI {self.base_uri!r} is not an absolute http(s) URI")
        if parts.query or parts.fragment:
            raise LinkError(f"Base URI {self.base_uri!r} must not carry a query or fragment")
        return parts

    def build(self, params: Sequence[tuple[str, Any]] = ()) -> str:
        """Compose base URI and query parameters. None values are skipped."""
        parts = self._split_base()
        query = urlencode([(k, v) for k, v in params if v is not None], quote_via=quote, safe="")
        return urlunsplit((parts.scheme, parts.netloc, parts.path, query, ""))

    def link(self, params: Sequence[tuple[str, Any]] = ()) -> str | None:
        try:
            return self.build(params)
        except LinkError as e:
            logger.warning("Navigation link omitted: %s", e)
            return None

    def cursor_links(
        self, limit: int, token: str | None, next_token: str | None
    ) -> tuple[str | None, str | None]:
        """Return (curLink, nextLink) for a cursor page."""
        cur_link = self.link([(LIMIT_PARAM, limit), (TOKEN_PARAM, token or None)])
        next_link = None
        if next_token is not None:
            next_link = self.link([(LIMIT_PARAM, limit), (TOKEN_PARAM, next_token)])
        return cur_link, next_link

    def offset_link(self, page: int | None, size: int) -> str | None:
        if page is None:
            return None
        return self.link([(PAGE_PARAM, page), (SIZE_PARAM, size)])

    def resource_link(self, path: str, params: Sequence[tuple[str, Any]] = ()) -> str | None:
        """Link to another resource under the base URI's scheme and host.

        Example: resource_link("/polls/abc/tally", [("tally", "agree")])
        """
        try:
            parts = self._split_base()
        except LinkError as e:
            logger.warning("Resource link omitted: %s", e)
            return None
        query = urlencode([(k, v) for k, v in params if v is not None], quote_via=quote, safe="")
        return urlunsplit((parts.scheme, parts.netloc, path, query, ""))
