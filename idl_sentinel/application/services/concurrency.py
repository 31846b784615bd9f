"""Bounded-concurrency task pool with per-item outcome capture."""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class TaskOutcome(Generic[T, R]):
    """Result of running the worker on one item: a value or an exception."""

    item: T
    result: R | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def bounded_map(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    limit: int,
    delay_after: float = 0.0,
) -> list[TaskOutcome[T, R]]:
    """Run ``worker`` over ``items`` with at most ``limit`` calls in flight.

    Outcomes come back in input order. A failing item never cancels the
    others; its exception is captured on the outcome. ``delay_after`` keeps
    the slot occupied for a fixed pause after each call, which spaces out
    calls to rate-limited endpoints.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")

    semaphore = asyncio.Semaphore(limit)

    async def run_one(item: T) -> TaskOutcome[T, R]:
        async with semaphore:
            try:
                outcome: TaskOutcome[T, R] = TaskOutcome(item=item, result=await worker(item))
            except Exception as exc:
                outcome = TaskOutcome(item=item, error=exc)
            if delay_after > 0:
                await asyncio.sleep(delay_after)
            return outcome

    return list(await asyncio.gather(*(run_one(item) for item in items)))
