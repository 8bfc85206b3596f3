"""
Timing of engine operations.

Whole operations (one trend search, one pattern search) are timed and
logged to the ``chartengine.perf`` category together with the evaluation
ID, so a slow search can be matched to the scoring debug output it
produced.

    with log_timing("find_trends") as ctx:
        ctx["candidates"] = len(pairs)

    @timed("find_head_and_shoulders")
    def find_head_and_shoulders(...):
        ...

Keep these out of per-candle and per-candidate loops.
"""

from __future__ import annotations

import functools
import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Generator, Optional

from .trace_context import get_evaluation_id

PERF_LOGGER_NAME = "chartengine.perf"

DEFAULT_WARN_MS = 500.0
DEFAULT_ERROR_MS = 2000.0

_perf_logger: Optional[logging.Logger] = None


def get_perf_logger() -> logging.Logger:
    global _perf_logger
    if _perf_logger is None:
        _perf_logger = logging.getLogger(PERF_LOGGER_NAME)
    return _perf_logger


def set_perf_logger(logger: logging.Logger) -> None:
    """Replace the perf logger, e.g. to capture records in tests."""
    global _perf_logger
    _perf_logger = logger


def _level_for(elapsed_ms: float, warn_ms: float, error_ms: float) -> int:
    if elapsed_ms >= error_ms:
        return logging.ERROR
    if elapsed_ms >= warn_ms:
        return logging.WARNING
    return logging.DEBUG


def _report(operation: str, elapsed_ms: float, level: int, details: Dict[str, Any]) -> None:
    evaluation_id = get_evaluation_id()
    data = {"eval": evaluation_id, "operation": operation, "duration_ms": round(elapsed_ms, 2)}
    data.update(details)
    suffix = " (slow)" if level > logging.DEBUG else ""
    get_perf_logger().log(
        level, "[%s] %s took %.1fms%s", evaluation_id, operation, elapsed_ms, suffix, extra={"data": data}
    )


@contextmanager
def log_timing(
    operation: str,
    warn_threshold_ms: float = DEFAULT_WARN_MS,
    error_threshold_ms: float = DEFAULT_ERROR_MS,
    extra: Optional[dict] = None,
) -> Generator[dict, None, None]:
    """
    Time the enclosed block and log it on exit, also when it raises.

    The yielded dict is merged into the log record's ``data``, so the
    block can attach counts it only knows at the end. The level is
    DEBUG, then WARNING at ``warn_threshold_ms`` and ERROR at
    ``error_threshold_ms``.
    """
    details: Dict[str, Any] = dict(extra or {})
    started = time.perf_counter()
    try:
        yield details
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        _report(operation, elapsed_ms, _level_for(elapsed_ms, warn_threshold_ms, error_threshold_ms), details)


def timed(
    operation: Optional[str] = None,
    warn_threshold_ms: float = DEFAULT_WARN_MS,
    error_threshold_ms: float = DEFAULT_ERROR_MS,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator form of :func:`log_timing`; the operation defaults to the function name."""

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        name = operation or func.__name__

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with log_timing(name, warn_threshold_ms, error_threshold_ms):
                return func(*args, **kwargs)

        return wrapper

    return decorator
