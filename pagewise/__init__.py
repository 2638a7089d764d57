from pagewise.core import (
    Snapshot,
    key_of,
    ContinuationToken,
    CursorPaginator,
    OffsetPaginator,
    LinkBuilder,
    PageInfo,
    PageDesc,
    CursorEnvelope,
    OffsetEnvelope,
    CollectionView,
)
from pagewise.adapters import (
    Projection,
    MetadataProjection,
    JobProjection,
    PollProjection,
    UpdateType,
    TallyBucket,
    RepairKind,
    PeerUrlKind,
)
from pagewise.lifecycle import (
    enable_tracing,
    disable_tracing,
    PageEvent,
    add_listener,
    set_request_context,
    get_request_context,
    clear_request_context,
)
from pagewise.integrations import init_app
from pagewise.utils import (
    PagewiseError,
    ValidationError,
    InvalidToken,
    PaginationConflict,
    NotFound,
    Forbidden,
    LinkError,
    LinkStyle,
    OffsetPage,
    PageResult,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "Snapshot",
    "key_of",
    "ContinuationToken",
    "CursorPaginator",
    "OffsetPaginator",
    "LinkBuilder",
    "PageInfo",
    "PageDesc",
    "CursorEnvelope",
    "OffsetEnvelope",
    "CollectionView",
    # Adapters
    "Projection",
    "MetadataProjection",
    "JobProjection",
    "PollProjection",
    "UpdateType",
    "TallyBucket",
    "RepairKind",
    "PeerUrlKind",
    # Lifecycle
    "enable_tracing",
    "disable_tracing",
    "PageEvent",
    "add_listener",
    "set_request_context",
    "get_request_context",
    "clear_request_context",
    # Integrations
    "init_app",
    # Utils
    "PagewiseError",
    "ValidationError",
    "InvalidToken",
    "PaginationConflict",
    "NotFound",
    "Forbidden",
    "LinkError",
    "LinkStyle",
    "OffsetPage",
    "PageResult",
]
