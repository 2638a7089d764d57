from __future__ import annotations

from contextvars import ContextVar, Token
from typing import Any

_request_context: ContextVar[dict[str, Any]] = ContextVar("_request_context", default={})


def set_request_context(
    *,
    request_id: str | None = None,
    user_id: str | None = None,
    ip_address: str | None = None,
    **extra: Any,
) -> Token:
    """Set per-request context. Returns token for reset."""
    ctx = {
        "request_id": request_id,
        "user_id": user_id,
        "ip_address": ip_address,
        **extra,
    }
    return _request_context.set(ctx)


def get_request_context() -> dict[str, Any]:
    """Read the current request context."""
    return _request_context.get()


def clear_request_context(token: Token | None = None) -> None:
    """Reset request context."""
    if token is not None:
        _request_context.reset(token)
    else:
        _request_context.set({})
