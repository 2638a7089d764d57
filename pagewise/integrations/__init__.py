from pagewise.integrations.fastapi import (
    init_app,
    register_exception_handlers,
    request_context_middleware,
    CursorParams,
    OffsetParams,
    HeaderRoleAuthorizer,
)
from pagewise.integrations.routers import metadata_router, mdupdates_router, polls_router

__all__ = [
    "init_app",
    "register_exception_handlers",
    "request_context_middleware",
    "CursorParams",
    "OffsetParams",
    "HeaderRoleAuthorizer",
    "metadata_router",
    "mdupdates_router",
    "polls_router",
]
