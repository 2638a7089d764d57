from __future__ import annotations

from typing import Any, Generic, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

from pagewise.core.links import LinkBuilder
from pagewise.utils.pagination import OffsetPage, PageResult
from pagewise.utils.types import LinkStyle

T = TypeVar("T")


class PageInfo(BaseModel):
    """Cursor page metadata."""

    model_config = ConfigDict(populate_by_name=True)

    results_per_page: int = Field(alias="resultsPerPage")
    cur_link: str | None = Field(default=None, alias="curLink")
    continuation_token: str | None = Field(default=None, alias="continuationToken")
    next_link: str | None = Field(default=None, alias="nextLink")


class PageDesc(BaseModel):
    """Offset page metadata. nextPage/prevPage are page numbers or links."""

    model_config = ConfigDict(populate_by_name=True)

    total: int
    size: int
    page: int
    next_page: Union[int, str, None] = Field(default=None, alias="nextPage")
    prev_page: Union[int, str, None] = Field(default=None, alias="prevPage")


class CursorEnvelope(BaseModel, Generic[T]):
    """Cursor page response: items plus pageInfo."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    items: list[T]
    page_info: PageInfo = Field(alias="pageInfo")

    @classmethod
    def from_result(
        cls, result: PageResult, links: LinkBuilder, token: str | None = None
    ) -> CursorEnvelope:
        cur_link, next_link = links.cursor_links(result.limit, token, result.next_token)
        return cls(
            items=result.items,
            page_info=PageInfo(
                results_per_page=len(result.items),
                cur_link=cur_link,
                continuation_token=result.next_token,
                next_link=next_link,
            ),
        )

    def dump(self, items_field: str = "items") -> dict[str, Any]:
        """Render the JSON shape, naming the item collection ``items_field``."""
        items = self.model_dump(mode="json", by_alias=True, include={"items"})["items"]
        return {
            items_field: items,
            "pageInfo": self.page_info.model_dump(mode="json", by_alias=True, exclude_none=True),
        }


class OffsetEnvelope(BaseModel, Generic[T]):
    """Offset page response: items plus pageDesc."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    items: list[T]
    page_desc: PageDesc = Field(alias="pageDesc")

    @classmethod
    def from_page(
        cls,
        page_obj: OffsetPage,
        links: LinkBuilder | None = None,
        style: LinkStyle = LinkStyle.PAGE_NUMBER,
    ) -> OffsetEnvelope:
        if style is LinkStyle.URI and links is not None:
            next_page = links.offset_link(page_obj.next_page, page_obj.size)
            prev_page = links.offset_link(page_obj.prev_page, page_obj.size)
        else:
            next_page, prev_page = page_obj.next_page, page_obj.prev_page
        return cls(
            items=page_obj.items,
            page_desc=PageDesc(
                total=page_obj.total,
                size=page_obj.size,
                page=page_obj.page,
                next_page=next_page,
                prev_page=prev_page,
            ),
        )

    def dump(self, items_field: str = "items") -> dict[str, Any]:
        items = self.model_dump(mode="json", by_alias=True, include={"items"})["items"]
        return {
            items_field: items,
            "pageDesc": self.page_desc.model_dump(mode="json", by_alias=True, exclude_none=True),
        }
