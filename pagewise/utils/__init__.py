from pagewise.utils.exceptions import (
    PagewiseError,
    ValidationError,
    InvalidToken,
    PaginationConflict,
    NotFound,
    Forbidden,
    LinkError,
)
from pagewise.utils.pagination import OffsetPage, PageResult
from pagewise.utils.settings import SettingsResolver
from pagewise.utils.types import (
    KeyPart,
    Position,
    SortKey,
    Predicate,
    LinkStyle,
    as_position,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    CONTENT_ADMIN_ROLE,
)

__all__ = [
    "PagewiseError",
    "ValidationError",
    "InvalidToken",
    "PaginationConflict",
    "NotFound",
    "Forbidden",
    "LinkError",
    "OffsetPage",
    "PageResult",
    "SettingsResolver",
    "KeyPart",
    "Position",
    "SortKey",
    "Predicate",
    "LinkStyle",
    "as_position",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "CONTENT_ADMIN_ROLE",
]
