from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable

from pagewise.lifecycle.context import get_request_context
from pagewise.utils.exceptions import PaginationConflict

logger = logging.getLogger("pagewise")


@dataclass(frozen=True)
class PageEvent:
    """Represents a single paginator call for tracing."""

    mode: str
    collection: str
    limit: int | None = None
    duration_ms: float = 0.0
    result_count: int | None = None
    conflict: bool = False
    request_id: str | None = None


class _ObservabilityState:
    """Global mutable state for observability."""

    def __init__(self) -> None:
        self.enabled: bool = False
        self.slow_page_threshold_ms: float = 50.0
        self.listeners: list[Callable[[PageEvent], Any]] = []
        self.events: list[PageEvent] = []
        self.capture_events: bool = False


_state = _ObservabilityState()


def enable_tracing(slow_page_ms: float = 50.0, capture_events: bool = False) -> None:
    """Enable page tracing and observability."""
    _state.enabled = True
    _state.slow_page_threshold_ms = slow_page_ms
    _state.capture_events = capture_events


def disable_tracing() -> None:
    """Disable tracing and clear all state."""
    _state.enabled = False
    _state.slow_page_threshold_ms = 50.0
    _state.listeners.clear()
    _state.events.clear()
    _state.capture_events = False


def get_events() -> list[PageEvent]:
    """Return captured events."""
    return list(_state.events)


def clear_events() -> None:
    """Clear captured events."""
    _state.events.clear()


def add_listener(callback: Callable[[PageEvent], Any]) -> None:
    """Register a listener that receives PageEvent on each paginator call."""
    _state.listeners.append(callback)


def remove_listener(callback: Callable[[PageEvent], Any]) -> None:
    """Remove a previously registered listener."""
    _state.listeners.remove(callback)


def emit_event(event: PageEvent) -> None:
    """Emit a page event: store, log slow pages, notify listeners."""
    if not _state.enabled:
        return

    if _state.capture_events:
        _state.events.append(event)

    if event.duration_ms > _state.slow_page_threshold_ms:
        logger.warning(
            "Slow page: %s page of %s took %.1fms (threshold: %.1fms)",
            event.mode,
            event.collection,
            event.duration_ms,
            _state.slow_page_threshold_ms,
        )

    for listener in _state.listeners:
        listener(event)


@contextmanager
def track_page(mode: str, collection: str, limit: int | None = None):
    """Context manager that times a paginator call and emits a PageEvent."""
    if not _state.enabled:
        yield {"result_count": None}
        return

    start = time.perf_counter()
    ctx: dict[str, Any] = {"result_count": None}
    conflict = False
    try:
        yield ctx
    except PaginationConflict:
        conflict = True
        raise
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        event = PageEvent(
            mode=mode,
            collection=collection,
            limit=limit,
            duration_ms=duration_ms,
            result_count=ctx.get("result_count"),
            conflict=conflict,
            request_id=get_request_context().get("request_id"),
        )
        emit_event(event)
