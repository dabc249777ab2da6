# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Batch processing on top of the token bucket scheduler.

Every item is submitted to the scheduler up front, in input order, so the
scheduler's FIFO admission decides when each one runs. Outcomes are then
collected as they settle. A failing item never aborts the batch.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

from ..exceptions import OperationError, SchedulerStoppedError
from ..observability.collector import UnifiedMetricsCollector, resolve_collector
from ..observability.constants import BATCH_ITEMS_TOTAL
from ..scheduler.token_bucket import TokenBucketScheduler
from ..types.batch import BatchResult, ProcessingFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class BatchCoordinator:
    """
    Apply an async processor to many items through a shared scheduler.

    Example:
        >>> coordinator = BatchCoordinator(scheduler)
        >>> result = await coordinator.process_all(recipes, summarize_recipe)
        >>> for failure in result.failed:
        ...     logger.warning(f"{failure.item}: {failure.error}")
    """

    def __init__(
        self,
        scheduler: TokenBucketScheduler,
        metrics_enabled: bool = False,
        metrics_collector: UnifiedMetricsCollector | None = None,
    ) -> None:
        self.scheduler = scheduler
        self.metrics_collector = resolve_collector(metrics_enabled, metrics_collector)

    async def process_all(
        self,
        items: Iterable[T],
        processor: Callable[[T], Awaitable[R]],
    ) -> BatchResult[R, T]:
        """
        Process every item and partition the outcomes.

        Args:
            items: Input items; consumed once
            processor: Async function applied to each item

        Returns:
            BatchResult with successes and failures in completion order
        """
        items = list(items)
        result: BatchResult[R, T] = BatchResult()
        if not items:
            return result

        pending: dict[asyncio.Future[Any], T] = {}
        for item in items:
            try:
                future = self.scheduler.submit(self._bind(processor, item))
            except SchedulerStoppedError as e:
                self._record_failure(result, item, e)
                continue
            pending[future] = item

        remaining = set(pending)
        while remaining:
            done, remaining = await asyncio.wait(
                remaining, return_when=asyncio.FIRST_COMPLETED
            )
            for future in done:
                self._record(result, pending[future], future)

        logger.info(
            f"Batch processing complete: {len(result.successful)} succeeded, "
            f"{len(result.failed)} failed"
        )
        return result

    @staticmethod
    def _bind(
        processor: Callable[[T], Awaitable[R]], item: T
    ) -> Callable[[], Awaitable[R]]:
        async def _operation() -> R:
            return await processor(item)

        return _operation

    def _record(
        self, result: BatchResult[R, T], item: T, future: "asyncio.Future[Any]"
    ) -> None:
        error: BaseException | None
        if future.cancelled():
            error = asyncio.CancelledError()
        else:
            error = future.exception()

        if error is None:
            result.successful.append(future.result())
            self._count("success")
        else:
            self._record_failure(result, item, error)

    def _record_failure(
        self, result: BatchResult[R, T], item: T, error: BaseException
    ) -> None:
        if not isinstance(error, Exception):
            wrapped = OperationError("Unknown error", original=error)
            wrapped.__cause__ = error
            error = wrapped
        result.failed.append(ProcessingFailure(item=item, error=error))
        logger.debug(f"Batch item failed: {type(error).__name__}: {error}")
        self._count("failure")

    def _count(self, outcome: str) -> None:
        if self.metrics_collector:
            self.metrics_collector.inc_counter(
                BATCH_ITEMS_TOTAL, labels={"outcome": outcome}
            )


__all__ = ["BatchCoordinator"]
