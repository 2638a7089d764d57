from pagewise.lifecycle.context import (
    set_request_context,
    get_request_context,
    clear_request_context,
)
from pagewise.lifecycle.observability import (
    enable_tracing,
    disable_tracing,
    PageEvent,
    add_listener,
    remove_listener,
    track_page,
)

__all__ = [
    "set_request_context",
    "get_request_context",
    "clear_request_context",
    "enable_tracing",
    "disable_tracing",
    "PageEvent",
    "add_listener",
    "remove_listener",
    "track_page",
]
