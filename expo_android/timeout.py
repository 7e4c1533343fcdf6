"""Deadline helpers for MCP tools.

A tool starts one deadline for its whole execution; adb commands issued
inside it query `remaining_time()` so a single slow command cannot outlive
the tool's own budget.
"""

from __future__ import annotations

import contextvars
import time
from contextlib import asynccontextmanager
from typing import Optional


_deadline_ts: contextvars.ContextVar[Optional[float]] = contextvars.ContextVar(
    "expo_android_deadline_ts", default=None
)


def has_deadline() -> bool:
    """Return True if a deadline is active in the current context."""
    return _deadline_ts.get() is not None


def remaining_time(min_floor: float = 0.05, default: float = 60.0) -> float:
    """Seconds left until the active deadline, or `default` without one.

    Never returns less than `min_floor`.
    """
    dl = _deadline_ts.get()
    if dl is None:
        return max(min_floor, float(default))
    return max(min_floor, float(dl - time.monotonic()))


def clamp_to_deadline(timeout: float) -> float:
    """Shrink a per-command timeout so it ends no later than the deadline."""
    if not has_deadline():
        return float(timeout)
    return max(0.1, min(float(timeout), remaining_time()))


@asynccontextmanager
async def start_deadline(total_seconds: float):
    """Start a deadline window for the current task.

    Enforcement is left to `asyncio.timeout(total_seconds)`; this only
    publishes the deadline for budgeting.
    """
    budget = max(0.05, float(total_seconds))
    token = _deadline_ts.set(time.monotonic() + budget)
    try:
        yield
    finally:
        _deadline_ts.reset(token)
