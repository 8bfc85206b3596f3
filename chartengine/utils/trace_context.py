"""
Trace context for correlating logs across a single chart evaluation.

Provides:
- Unique evaluation IDs (6-char hex) for each script evaluation
- Context propagation via contextvars
- Easy access to current evaluation ID from any module

Usage:
    # At the start of an evaluation
    with new_evaluation():
        trends = find_trends(candles, points, "low", formula)

    # In any module
    from chartengine.utils.trace_context import get_evaluation_id
    logger.info(f"[{get_evaluation_id()}] Scoring...")
"""

from __future__ import annotations

import secrets
from contextvars import ContextVar
from contextlib import contextmanager
from typing import Optional, Generator

# Context variable for the current evaluation ID
_evaluation_id: ContextVar[Optional[str]] = ContextVar("evaluation_id", default=None)

# Counter for evaluations within a session (for debugging)
_evaluation_counter: int = 0


def generate_evaluation_id() -> str:
    """
    Generate a new unique evaluation ID.

    Returns:
        6-character hex string (e.g., "a7f3b2").
    """
    return secrets.token_hex(3)


def get_evaluation_id() -> str:
    """
    Get the current evaluation ID.

    Returns:
        Current evaluation ID, or "------" if no evaluation is active.
    """
    evaluation_id = _evaluation_id.get()
    return evaluation_id if evaluation_id else "------"


@contextmanager
def new_evaluation() -> Generator[str, None, None]:
    """
    Context manager scoping one chart evaluation with a unique ID.

    Yields:
        The new evaluation ID.

    Example:
        with new_evaluation() as evaluation_id:
            logger.info(f"Evaluating script {evaluation_id}")
    """
    global _evaluation_counter
    _evaluation_counter += 1

    evaluation_id = generate_evaluation_id()
    token = _evaluation_id.set(evaluation_id)

    try:
        yield evaluation_id
    finally:
        _evaluation_id.reset(token)


def get_evaluation_counter() -> int:
    """Get the total number of evaluations created in this session."""
    return _evaluation_counter


def reset_evaluation_counter() -> None:
    """Reset the evaluation counter (for testing)."""
    global _evaluation_counter
    _evaluation_counter = 0
