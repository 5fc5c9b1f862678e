"""
Async Utilities for Provider Fan-Out.

Python 3.12+ features used:
- asyncio.TaskGroup for structured concurrency (3.11+)
- Type parameter syntax for generic functions

Provides:
- Settle-all parallel execution (no fail-fast, no sibling cancellation)
- Splitting settled outcomes into results and failures
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Parallel Execution with TaskGroup (Python 3.11+)
# =============================================================================

async def gather_settled(*coros: Awaitable[T]) -> list[T | Exception]:
    """
    Execute coroutines in parallel and wait for every one of them.

    Each coroutine is wrapped so that its exception is captured as a value
    instead of propagating into the TaskGroup. A failing task therefore
    never cancels its siblings.

    Args:
        *coros: Coroutines to execute

    Returns:
        Results in the same order as ``coros``; failed entries hold the
        exception that was raised.

    Example:
        outcomes = await gather_settled(
            provider_a.fetch("cats"),
            provider_b.fetch("cats"),
        )
    """
    results: list[T | Exception] = [None] * len(coros)  # type: ignore[list-item]

    async def safe_run(coro: Awaitable[T], index: int) -> None:
        try:
            results[index] = await coro
        except Exception as e:
            results[index] = e

    async with asyncio.TaskGroup() as tg:
        for i, coro in enumerate(coros):
            tg.create_task(safe_run(coro, i))

    return results


def split_outcomes(
    outcomes: list[T | Exception],
) -> tuple[list[tuple[int, T]], list[tuple[int, Exception]]]:
    """
    Partition settled outcomes into successes and failures.

    Indices are preserved so callers can map outcomes back to the
    coroutine that produced them.
    """
    successes: list[tuple[int, T]] = []
    failures: list[tuple[int, Exception]] = []
    for index, outcome in enumerate(outcomes):
        if isinstance(outcome, Exception):
            failures.append((index, outcome))
        else:
            successes.append((index, outcome))
    return successes, failures
