"""
Concurrency utilities for deep-report.

Provides bounded fan-out with an inter-batch cooldown for rate-limited
external calls, and a single top-level deadline from which per-call
timeouts are derived.

Example:
    from deep_report.core.concurrency import Deadline, run_batched

    deadline = Deadline(timeout=3600)
    summaries = await run_batched(links, 3, summarize_link)
    per_call = deadline.bound(300.0)
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

# Pause between consecutive chunks, in seconds
DEFAULT_COOLDOWN = 1.0

T = TypeVar("T")
R = TypeVar("R")


async def run_batched(
    items: Sequence[T],
    width: int,
    worker: Callable[[T], Awaitable[R]],
    *,
    cooldown: float = DEFAULT_COOLDOWN,
) -> List[R]:
    """Run ``worker`` over ``items`` in consecutive chunks of ``width``.

    Every worker in a chunk runs concurrently and the whole chunk is awaited
    before the next one starts. A fixed ``cooldown`` pause separates chunks
    (never after the last one). Results come back in input order.

    The first worker failure propagates: the chunk's remaining tasks are
    cancelled and later chunks never start.

    Args:
        items: Units of work, processed in order
        width: Maximum number of concurrent workers per chunk
        worker: Async callable applied to each item
        cooldown: Seconds to sleep between chunks

    Returns:
        Worker results, one per item, in input order

    Raises:
        ValueError: If width is smaller than 1
    """
    if width < 1:
        raise ValueError(f"width must be >= 1, got {width}")

    results: List[R] = []
    total = len(items)
    for start in range(0, total, width):
        chunk = items[start : start + width]
        logger.debug(
            "Running batch %d-%d of %d (width=%d)",
            start + 1,
            start + len(chunk),
            total,
            width,
        )
        tasks = [asyncio.ensure_future(worker(item)) for item in chunk]
        try:
            results.extend(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        if start + width < total:
            await asyncio.sleep(cooldown)

    return results


@dataclass
class Deadline:
    """A monotonic time budget shared by every call in one workflow run.

    A ``timeout`` of None means no deadline; ``remaining()`` then returns
    None and ``bound()`` passes per-call timeouts through unchanged.

    Attributes:
        timeout: Total budget in seconds, or None for unlimited
        started_at: ``time.monotonic()`` reading when the budget started
    """

    timeout: Optional[float] = None
    started_at: float = field(default_factory=time.monotonic)

    def elapsed(self) -> float:
        return time.monotonic() - self.started_at

    def remaining(self) -> Optional[float]:
        """Seconds left in the budget (never negative), or None if unlimited."""
        if self.timeout is None:
            return None
        return max(0.0, self.timeout - self.elapsed())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def bound(self, timeout: Optional[float]) -> Optional[float]:
        """Clamp a per-call timeout so it never outlives the deadline.

        Args:
            timeout: Requested per-call timeout in seconds, or None

        Returns:
            The smaller of ``timeout`` and the remaining budget; None only
            when both are unlimited
        """
        remaining = self.remaining()
        if remaining is None:
            return timeout
        if timeout is None:
            return remaining
        return min(timeout, remaining)
