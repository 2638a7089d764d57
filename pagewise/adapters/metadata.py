from __future__ import annotations

import logging

from pagewise.adapters.base import Projection
from pagewise.adapters.records import MetadataItem, MetadataStore
from pagewise.core.snapshot import key_of
from pagewise.core.view import CollectionView, maybe_await
from pagewise.utils.exceptions import NotFound
from pagewise.utils.pagination import PageResult

logger = logging.getLogger(__name__)


class MetadataProjection(Projection):
    """Cursor-paged view of the metadata items of an AU, in md_item_seq order."""

    class Settings:
        collection = "au_metadata"

    def __init__(self, store: MetadataStore) -> None:
        self._store = store

    async def items(self, auid: str) -> CollectionView[MetadataItem]:
        """Return a view over the AU's items.

        Raises:
            NotFound: If the store does not know the AU
        """
        items = await maybe_await(self._store.get_au_items(auid))
        if items is None:
            raise NotFound(f"No Archival Unit found for auid '{auid}'")
        materialized = list(items)
        return CollectionView(
            lambda: materialized,
            key=key_of("md_item_seq"),
            name=f"{self.collection_name}[{auid}]",
        )

    async def fetch_page(self, auid: str, limit: int, token: str | None = None) -> PageResult[MetadataItem]:
        view = await self.items(auid)
        return await view.cursor_paginate(limit, token)
