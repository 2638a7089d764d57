from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, TypeVar

from pagewise.utils.exceptions import ValidationError
from pagewise.utils.settings import SettingsResolver
from pagewise.utils.types import LinkStyle

E = TypeVar("E", bound=Enum)


def parse_selector(selector_class: type[E], value: str | None, param: str) -> E:
    """Map a request string onto a closed selector enum.

    Raises:
        ValidationError: If value is missing or names no member
    """
    for member in selector_class:
        if member.value == value:
            return member
    allowed = ", ".join(m.value for m in selector_class)
    raise ValidationError(f"Invalid {param} '{value}'; expected one of: {allowed}", value=value)


class Projection:
    """Base class for read-only views over a collaborator's state.

    Subclasses may declare an inner ``Settings`` class with ``collection``,
    ``default_page_size``, ``max_page_size`` and ``link_style``.
    """

    _collection_name: ClassVar[str] = ""
    _default_page_size: ClassVar[int] = 0
    _max_page_size: ClassVar[int | None] = None
    _link_style: ClassVar[LinkStyle] = LinkStyle.PAGE_NUMBER

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._collection_name = SettingsResolver.get_collection_name(cls)
        cls._default_page_size = SettingsResolver.get_default_page_size(cls)
        cls._max_page_size = SettingsResolver.get_max_page_size(cls)
        cls._link_style = SettingsResolver.get_link_style(cls)

    @property
    def collection_name(self) -> str:
        return self._collection_name

    @property
    def default_page_size(self) -> int:
        return self._default_page_size

    @property
    def link_style(self) -> LinkStyle:
        return self._link_style
