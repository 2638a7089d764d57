"""Settings resolution utilities for Projection configuration."""

from __future__ import annotations

import re

from pagewise.utils.types import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, LinkStyle


def _snake_case(name: str) -> str:
    """Convert a CamelCase class name to snake_case.

    Args:
        name: Class name

    Returns:
        snake_case name with a trailing "_projection" removed
    """
    snake = re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()
    if snake.endswith("_projection"):
        snake = snake[: -len("_projection")]
    return snake


class SettingsResolver:
    """Resolves projection settings from inner Settings class."""

    @staticmethod
    def get_collection_name(cls: type) -> str:
        """Get the collection name used in logs and page events.

        Args:
            cls: Projection class

        Returns:
            Collection name
        """
        settings = getattr(cls, "Settings", None)
        if settings and hasattr(settings, "collection"):
            return settings.collection
        return _snake_case(cls.__name__)

    @staticmethod
    def get_default_page_size(cls: type) -> int:
        """Get the offset page size used when a request omits one.

        Args:
            cls: Projection class

        Returns:
            Default page size
        """
        settings = getattr(cls, "Settings", None)
        if settings and hasattr(settings, "default_page_size"):
            return settings.default_page_size
        return DEFAULT_PAGE_SIZE

    @staticmethod
    def get_max_page_size(cls: type) -> int | None:
        settings = getattr(cls, "Settings", None)
        if settings and hasattr(settings, "max_page_size"):
            return settings.max_page_size
        return MAX_PAGE_SIZE

    @staticmethod
    def get_link_style(cls: type) -> LinkStyle:
        """Get the offset link style from Settings.

        Args:
            cls: Projection class

        Returns:
            LinkStyle for nextPage/prevPage rendering
        """
        settings = getattr(cls, "Settings", None)
        if settings and hasattr(settings, "link_style"):
            return LinkStyle(settings.link_style)
        return LinkStyle.PAGE_NUMBER
