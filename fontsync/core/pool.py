"""
Bounded worker pool used by every command.

Each item runs on its own worker thread; an exception in one item is
captured in that item's result and never stops the others.
"""

from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from fontsync.utils.logging import logger

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class TaskResult(Generic[T, R]):
    """Outcome of one item: a value or the exception it raised."""

    item: T
    value: R | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class WorkerPool:
    """Run a function over independent items with a fixed number of workers."""

    def __init__(self, parallel: int = 5, description: str = "Processing"):
        self.parallel = max(1, int(parallel or 1))
        self.description = description

    def map(
        self,
        func: Callable[[T], R],
        items: Iterable[T],
        key: Callable[[T], Any] = str,
    ) -> list[TaskResult[T, R]]:
        """
        Apply func to every item.

        Results are returned in completion order; callers that need to
        correlate them use ``TaskResult.item``.

        Args:
            func: Per-item function
            items: Items to process
            key: Label used for the item in log lines

        Returns:
            One TaskResult per item
        """
        items = list(items)
        total = len(items)
        results: list[TaskResult[T, R]] = []
        if not items:
            logger.info(f"{self.description}: nothing to do")
            return results

        logger.info(f"{self.description}: {total} items, {self.parallel} workers")

        with ThreadPoolExecutor(max_workers=self.parallel) as executor:
            future_to_item = {executor.submit(func, item): item for item in items}

            for done, future in enumerate(as_completed(future_to_item), 1):
                item = future_to_item[future]
                try:
                    results.append(TaskResult(item, value=future.result()))
                except Exception as e:
                    logger.error(f"{key(item)} failed: {e}")
                    results.append(TaskResult(item, error=e))
                logger.debug(f"[{done}/{total}] {self.description}")

        return results

    @staticmethod
    def failures(results: list[TaskResult]) -> list[TaskResult]:
        return [r for r in results if not r.ok]
