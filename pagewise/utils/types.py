from enum import Enum
from typing import Any, Callable, TypeVar, Union

# Type aliases for better clarity
KeyPart = Union[str, int, float]
Position = tuple[KeyPart, ...]
SortKey = Callable[[Any], Position]
Predicate = Callable[[Any], bool]

# Generic type variable for collection items
T = TypeVar("T")

# Constants
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
CONTENT_ADMIN_ROLE = "contentAdminRole"


class LinkStyle(str, Enum):
    """How offset envelopes expose their neighbouring pages."""

    PAGE_NUMBER = "page_number"
    URI = "uri"


def as_position(key: Any) -> Position:
    """Normalize a sort key into a position tuple.

    Args:
        key: A single key part or a sequence of key parts

    Returns:
        Position tuple
    """
    if isinstance(key, tuple):
        return key
    if isinstance(key, list):
        return tuple(key)
    return (key,)
