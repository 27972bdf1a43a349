# =============================================================================
# Batch Execution
# =============================================================================
# Runs an async processor over items in fixed-size concurrent batches.
# Every item's outcome is collected; one failure never blocks its siblings.
# =============================================================================

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, Sequence, TypeVar

__all__ = ["BatchOutcome", "chunked", "process_in_batches"]

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class BatchOutcome(Generic[T, R]):
    """Result of processing one item: either a value or the raised error."""

    item: T
    value: Optional[R] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def chunked(items: Sequence[T], size: int) -> list[Sequence[T]]:
    """
    Split a sequence into consecutive chunks of at most ``size`` items.

    Raises:
        ValueError: If size is not positive
    """
    if size <= 0:
        raise ValueError(f"Batch size must be positive, got {size}")
    return [items[i:i + size] for i in range(0, len(items), size)]


async def process_in_batches(
    items: Sequence[T],
    batch_size: int,
    processor: Callable[[T], Awaitable[R]],
    *,
    label: str = "items",
) -> list[BatchOutcome[T, R]]:
    """
    Process items in sequential batches of concurrent tasks.

    Within a batch all calls run concurrently and settle independently
    (exceptions are captured, not raised). Batches run one after another,
    so at most ``batch_size`` calls are in flight at once.

    Args:
        items: Items to process
        batch_size: Maximum concurrent calls per batch
        processor: Async callable applied to each item
        label: Noun used in progress logs

    Returns:
        One BatchOutcome per item, in input order
    """
    batches = chunked(items, batch_size)
    outcomes: list[BatchOutcome[T, R]] = []

    for index, batch in enumerate(batches, start=1):
        logger.info(f"Processing batch {index}/{len(batches)} ({len(batch)} {label})")
        results = await asyncio.gather(
            *(processor(item) for item in batch),
            return_exceptions=True,
        )
        for item, result in zip(batch, results):
            if isinstance(result, BaseException):
                if isinstance(result, (KeyboardInterrupt, SystemExit)):
                    raise result
                outcomes.append(BatchOutcome(item=item, error=result))
            else:
                outcomes.append(BatchOutcome(item=item, value=result))

    return outcomes
