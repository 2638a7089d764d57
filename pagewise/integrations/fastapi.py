from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional, Union

from fastapi import Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pagewise.core.links import LinkBuilder
from pagewise.core.token import decode
from pagewise.core.view import maybe_await
from pagewise.lifecycle.context import clear_request_context, set_request_context
from pagewise.utils.exceptions import (
    Forbidden,
    NotFound,
    PagewiseError,
    PaginationConflict,
    ValidationError,
)

logger = logging.getLogger(__name__)

Authorizer = Callable[[Request, str], Union[None, Awaitable[None]]]

ERROR_STATUS_MAP: dict[type[PagewiseError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    PaginationConflict: status.HTTP_409_CONFLICT,
    Forbidden: status.HTTP_403_FORBIDDEN,
}


def status_for(exc: PagewiseError) -> int:
    """Return the HTTP status for an error, honouring subclasses."""
    for error_class in type(exc).__mro__:
        if error_class in ERROR_STATUS_MAP:
            return ERROR_STATUS_MAP[error_class]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def register_exception_handlers(app: Any) -> None:
    """Register pagewise exception handlers on a FastAPI app."""

    @app.exception_handler(PagewiseError)
    async def pagewise_error_handler(request: Request, exc: PagewiseError):
        status_code = status_for(exc)
        if isinstance(exc, ValidationError):
            logger.warning("%s %s: %s (value: %r)", request.method, request.url.path, exc, exc.value)
        elif status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
        else:
            logger.warning("%s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.warning("%s %s: invalid request %s", request.method, request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": [_error_summary(e) for e in exc.errors()]},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error("%s %s failed unexpectedly", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal Server Error"},
        )


def _error_summary(error: dict[str, Any]) -> dict[str, Any]:
    return {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}


class CursorParams:
    """FastAPI dependency for continuation-token pagination parameters.

    ``limit`` is required and must be non-negative; a malformed
    ``continuationToken`` is rejected before any collection is read.
    """

    def __init__(
        self,
        limit: Optional[int] = Query(None),
        continuation_token: Optional[str] = Query(None, alias="continuationToken"),
    ):
        if limit is None or limit < 0:
            raise ValidationError(
                f"Limit of requested items must be a non-negative integer; it was '{limit}'",
                value=limit,
            )
        decode(continuation_token)
        self.limit = limit
        self.token = continuation_token or None


class OffsetParams:
    """FastAPI dependency for page-number pagination parameters.

    Out-of-range values are clamped by the paginator.
    """

    def __init__(self, page: int = 1, size: Optional[int] = None):
        self.page = page
        self.size = size


def links_for(request: Request) -> LinkBuilder:
    """LinkBuilder rooted at the request URL without its query string."""
    return LinkBuilder(str(request.url.replace(query="", fragment="")))


class HeaderRoleAuthorizer:
    """Authorizer reading a comma-separated role list from a request header.

    Authentication happens upstream; this only checks what it was told.
    """

    def __init__(self, header: str = "x-user-roles") -> None:
        self.header = header

    def __call__(self, request: Request, role: str) -> None:
        roles = {r.strip() for r in request.headers.get(self.header, "").split(",") if r.strip()}
        if role not in roles:
            raise Forbidden(f"Role '{role}' is required for {request.method} {request.url.path}")


async def authorize(authorizer: Optional[Authorizer], request: Request, role: str) -> None:
    """Check the caller holds role; with no authorizer every caller is refused."""
    if authorizer is None:
        raise Forbidden(f"Role '{role}' is required for {request.method} {request.url.path}")
    await maybe_await(authorizer(request, role))


def request_context_middleware(app: Any) -> None:
    """Add middleware that sets the request context from request headers."""
    from starlette.middleware.base import BaseHTTPMiddleware

    class RequestContextMiddleware(BaseHTTPMiddleware):
        async def dispatch(self, request: Request, call_next):
            ip_address = None
            if request.client:
                ip_address = request.client.host
            token = set_request_context(
                request_id=request.headers.get("x-request-id"),
                user_id=request.headers.get("x-user-id"),
                ip_address=ip_address,
            )
            try:
                response = await call_next(request)
            finally:
                clear_request_context(token)
            return response

    app.add_middleware(RequestContextMiddleware)


def init_app(
    app: Any,
    *,
    metadata: Any = None,
    jobs: Any = None,
    polls: Any = None,
    authorizer: Optional[Authorizer] = None,
) -> Any:
    """Initialize a FastAPI app with the pagewise listing endpoints.

    Sets up:
    - Exception handlers mapping pagewise errors to HTTP statuses
    - Request context middleware
    - Routers for each projection supplied

    Args:
        app: FastAPI application instance
        metadata: MetadataProjection serving /metadata/aus/{auid}
        jobs: JobProjection serving /mdupdates
        polls: PollProjection serving /polls
        authorizer: Callable checking the role of mutating requests,
            HeaderRoleAuthorizer when omitted
    """
    from pagewise.integrations.routers import mdupdates_router, metadata_router, polls_router

    if authorizer is None:
        authorizer = HeaderRoleAuthorizer()

    register_exception_handlers(app)
    request_context_middleware(app)

    if metadata is not None:
        app.include_router(metadata_router(metadata))
    if jobs is not None:
        app.include_router(mdupdates_router(jobs, authorizer))
    if polls is not None:
        app.include_router(polls_router(polls, authorizer))
    return app
