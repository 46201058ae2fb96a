"""Call instrumentation for the service's external collaborators.

Weather lookups, Gemini calls and push delivery all go through
:func:`instrument_tool`, which logs how long each call took and whether it
raised.
"""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Any, Callable, Dict, ParamSpec, TypeVar

from closet_app.logging_config import ensure_correlation_id, get_logger, log_event

LOGGER = get_logger(__name__)
P = ParamSpec("P")
R = TypeVar("R")

_MAX_PREVIEW_KEYS = 6


def _argument_preview(kwargs: Dict[str, Any]) -> Dict[str, Any]:
    """Keyword names with scalar values only; bytes and large payloads are described by type."""

    preview: Dict[str, Any] = {}
    for key in list(kwargs)[:_MAX_PREVIEW_KEYS]:
        value = kwargs[key]
        preview[key] = value if isinstance(value, (str, int, float, bool, type(None))) else type(value).__name__
    if len(kwargs) > _MAX_PREVIEW_KEYS:
        preview["truncated"] = True
    return preview


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def instrument_tool(tool_name: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Log start, completion (with duration) and failure of every call to the wrapped function."""

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            correlation_id = ensure_correlation_id()
            log_event(
                LOGGER,
                logging.INFO,
                "tool_call_started",
                tool=tool_name,
                correlation_id=correlation_id,
                arguments=_argument_preview(kwargs),
            )
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                log_event(
                    LOGGER,
                    logging.ERROR,
                    "tool_call_failed",
                    tool=tool_name,
                    correlation_id=correlation_id,
                    duration_ms=_elapsed_ms(started),
                    error_type=type(exc).__name__,
                    exc_info=True,
                )
                raise
            log_event(
                LOGGER,
                logging.INFO,
                "tool_call_completed",
                tool=tool_name,
                correlation_id=correlation_id,
                duration_ms=_elapsed_ms(started),
            )
            return result

        return wrapper

    return decorator


__all__ = ["instrument_tool"]
