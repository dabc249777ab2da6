# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Token bucket scheduler for many concurrent call sites.

The scheduler admits queued operations in FIFO order when three conditions
hold at once:

1. fewer than ``max_concurrent`` operations are in flight,
2. the reservoir holds at least one token, and
3. ``min_time`` has elapsed since the previous dispatch.

Each dispatch takes one token. Tokens are never returned when an
operation finishes; instead the reservoir is refilled to ``interval_cap``
once per ``interval``, which caps throughput independently of how long
individual operations take.

All bookkeeping (queue, reservoir, in-flight counter, last dispatch time)
is owned by the scheduler and only touched from its event loop. Dispatch
decisions are made by a single coordinating task that lives while jobs
are waiting, so no locks are required around the reservoir.
"""

import asyncio
import contextlib
import functools
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any, ParamSpec, TypeVar

from typing_extensions import Self

from ..exceptions import SchedulerStoppedError
from ..observability.collector import UnifiedMetricsCollector, resolve_collector
from ..observability.constants import (
    JOBS_COMPLETED_TOTAL,
    JOBS_DROPPED_TOTAL,
    JOBS_FAILED_TOTAL,
    JOBS_IN_FLIGHT,
    JOBS_SCHEDULED_TOTAL,
    QUEUE_DEPTH,
    RESERVOIR_TOKENS,
)
from ..types.job import ScheduledJob
from .config import SchedulerConfig

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


class TokenBucketScheduler:
    """
    Bounded-concurrency scheduler with a refilling token reservoir.

    The scheduler never inspects results: an operation's return value or
    exception reaches the caller exactly as the operation produced it.

    Example:
        >>> scheduler = TokenBucketScheduler(SchedulerConfig(
        ...     max_concurrent=5, interval_cap=10, interval=1.0,
        ... ))
        >>> async with scheduler:
        ...     answer = await scheduler.schedule(lambda: call_model(prompt))
    """

    def __init__(
        self,
        config: SchedulerConfig,
        name: str = "default",
        metrics_enabled: bool = False,
        metrics_collector: UnifiedMetricsCollector | None = None,
    ) -> None:
        """
        Initialize the scheduler.

        Args:
            config: Concurrency, reservoir and spacing settings (validated
                when the config is built)
            name: Label used in logs and metrics
            metrics_enabled: Report to the global metrics collector
            metrics_collector: Explicit collector to report to (overrides
                metrics_enabled)
        """
        self.config = config
        self.name = name
        self.metrics_collector = resolve_collector(metrics_enabled, metrics_collector)
        self._min_time = config.effective_min_time

        self._queue: deque[ScheduledJob] = deque()
        self._in_flight = 0
        self._reservoir = config.interval_cap
        self._last_refill = time.monotonic()
        self._last_dispatch: float | None = None

        self._wakeup = asyncio.Event()
        self._dispatcher_task: asyncio.Task[None] | None = None
        self._active_tasks: set[asyncio.Task[None]] = set()
        self._stopped = False
        self._shutdown_lock = asyncio.Lock()

        self._total_scheduled = 0
        self._total_completed = 0
        self._total_failed = 0
        self._total_dropped = 0

        logger.info(
            f"Initialized {self.__class__.__name__} '{name}' "
            f"(max_concurrent={config.max_concurrent}, "
            f"interval_cap={config.interval_cap}, interval={config.interval}s, "
            f"min_time={self._min_time}s)"
        )

    # Public interface methods
    @property
    def in_flight(self) -> int:
        """Number of operations currently executing."""
        return self._in_flight

    @property
    def queued(self) -> int:
        """Number of jobs waiting for admission."""
        return len(self._queue)

    @property
    def reservoir(self) -> int:
        """Tokens available in the current interval."""
        self._refill(time.monotonic())
        return self._reservoir

    def is_running(self) -> bool:
        """Check if the scheduler still accepts work."""
        return not self._stopped

    def is_stopped(self) -> bool:
        return self._stopped

    def submit(self, operation: Callable[[], Awaitable[T]]) -> "asyncio.Future[T]":
        """
        Queue an operation and return the future of its outcome.

        Must be called from a running event loop. Jobs are admitted in the
        order they were submitted.

        Args:
            operation: Zero-argument async callable to run once admitted

        Returns:
            Future resolved with the operation's result or exception

        Raises:
            SchedulerStoppedError: If the scheduler has been stopped
        """
        if self._stopped:
            raise SchedulerStoppedError(
                f"Scheduler '{self.name}' has been stopped", scheduler_name=self.name
            )

        loop = asyncio.get_running_loop()
        job = ScheduledJob(operation=operation, future=loop.create_future())
        self._queue.append(job)
        self._total_scheduled += 1

        if self.metrics_collector:
            self.metrics_collector.inc_counter(
                JOBS_SCHEDULED_TOTAL, labels={"scheduler": self.name}
            )
        self._report_state()

        self._ensure_dispatcher(loop)
        self._wakeup.set()
        return job.future

    async def schedule(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run an operation once the scheduler admits it.

        Cancelling the caller before admission withdraws the job without
        using a token. Cancelling after admission leaves the operation
        running; only its result is discarded.

        Args:
            operation: Zero-argument async callable

        Returns:
            Whatever the operation returns

        Raises:
            SchedulerStoppedError: If the scheduler is stopped before the
                job is admitted
            Exception: Whatever the operation raises, unchanged
        """
        return await self.submit(operation)

    def wrap(self, fn: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        """
        Route every call of an async function through ``schedule``.

        Args:
            fn: The async function to rate limit

        Returns:
            An async function with the same signature as ``fn``
        """

        @functools.wraps(fn)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await self.schedule(functools.partial(fn, *args, **kwargs))

        return wrapper

    async def stop(self) -> None:
        """
        Stop admitting work and wait for in-flight operations to finish.

        Queued jobs that were never dispatched are rejected with
        SchedulerStoppedError. Operations already running are not
        cancelled. Calling stop more than once is a no-op.
        """
        async with self._shutdown_lock:
            if self._stopped:
                return

            self._stopped = True

            dropped = 0
            while self._queue:
                job = self._queue.popleft()
                if not job.future.done():
                    job.future.set_exception(
                        SchedulerStoppedError(
                            f"Scheduler '{self.name}' stopped before the job was dispatched",
                            scheduler_name=self.name,
                        )
                    )
                    dropped += 1
            self._total_dropped += dropped
            if dropped and self.metrics_collector:
                self.metrics_collector.inc_counter(
                    JOBS_DROPPED_TOTAL, value=dropped, labels={"scheduler": self.name}
                )

            if self._dispatcher_task is not None and not self._dispatcher_task.done():
                self._dispatcher_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._dispatcher_task
            self._dispatcher_task = None

            # An operation may stop its own scheduler; never wait on ourselves
            current = asyncio.current_task()
            pending = [task for task in self._active_tasks if task is not current]
            if pending:
                logger.debug(
                    f"Scheduler '{self.name}' waiting for {len(pending)} in-flight operations"
                )
                await asyncio.gather(*pending, return_exceptions=True)

            self._report_state()
            logger.info(
                f"{self.__class__.__name__} '{self.name}' stopped "
                f"({dropped} queued jobs dropped)"
            )

    async def __aenter__(self) -> Self:
        """
        Async context manager entry.

        Example:
            async with TokenBucketScheduler(config) as scheduler:
                result = await scheduler.schedule(operation)
        """
        if self._stopped:
            raise SchedulerStoppedError(
                f"Scheduler '{self.name}' has been stopped", scheduler_name=self.name
            )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Drain the scheduler even if the block raised."""
        await self.stop()

    def get_metrics(self) -> dict[str, Any]:
        """
        Get current scheduler metrics.

        Returns:
            Dictionary suitable for JSON serialization
        """
        return {
            "scheduler": self.name,
            "running": not self._stopped,
            "in_flight": self._in_flight,
            "queued": len(self._queue),
            "reservoir": self.reservoir,
            "max_concurrent": self.config.max_concurrent,
            "interval_cap": self.config.interval_cap,
            "interval": self.config.interval,
            "min_time": self._min_time,
            "total_scheduled": self._total_scheduled,
            "total_completed": self._total_completed,
            "total_failed": self._total_failed,
            "total_dropped": self._total_dropped,
        }

    # Dispatching
    def _ensure_dispatcher(self, loop: asyncio.AbstractEventLoop) -> None:
        if self._dispatcher_task is None or self._dispatcher_task.done():
            self._dispatcher_task = loop.create_task(
                self._dispatch_loop(), name=f"token-bucket-dispatcher-{self.name}"
            )

    async def _dispatch_loop(self) -> None:
        """Admit queued jobs until the queue is empty or the scheduler stops."""
        try:
            while self._queue and not self._stopped:
                self._wakeup.clear()
                delay = self._dispatch_next(time.monotonic())
                if delay == 0.0:
                    continue
                try:
                    await asyncio.wait_for(self._wakeup.wait(), timeout=delay)
                except asyncio.TimeoutError:
                    pass
        except Exception as e:
            logger.exception(f"Scheduler '{self.name}' dispatcher failed")
            self._reject_queued(e)

    def _reject_queued(self, error: Exception) -> None:
        # Waiting jobs would otherwise never resolve
        while self._queue:
            job = self._queue.popleft()
            if not job.future.done():
                job.future.set_exception(error)

    def _dispatch_next(self, now: float) -> float | None:
        """
        Try to dispatch the job at the head of the queue.

        Returns:
            0.0 if the queue changed and should be re-examined immediately,
            the number of seconds until a timed condition may be satisfied,
            or None when only a completing operation can unblock dispatch.
        """
        self._refill(now)

        while self._queue and self._queue[0].abandoned:
            self._queue.popleft()
            logger.debug(f"Scheduler '{self.name}' skipped a cancelled job")
        if not self._queue:
            self._report_state()
            return 0.0

        if self._in_flight >= self.config.max_concurrent:
            return None

        if self._reservoir < 1:
            return max(self._last_refill + self.config.interval - now, 0.0)

        if self._last_dispatch is not None:
            since_last = now - self._last_dispatch
            if since_last < self._min_time:
                return self._min_time - since_last

        job = self._queue.popleft()
        self._reservoir -= 1
        self._in_flight += 1
        self._last_dispatch = now

        task = asyncio.get_running_loop().create_task(self._run_job(job))
        self._active_tasks.add(task)
        task.add_done_callback(self._active_tasks.discard)

        logger.debug(
            f"Scheduler '{self.name}' dispatched job after "
            f"{now - job.submitted_at:.3f}s in queue "
            f"(in_flight={self._in_flight}, reservoir={self._reservoir})"
        )
        self._report_state()
        return 0.0

    def _refill(self, now: float) -> None:
        elapsed = now - self._last_refill
        if elapsed < self.config.interval:
            return
        periods = int(elapsed // self.config.interval)
        self._last_refill += periods * self.config.interval
        self._reservoir = self.config.interval_cap

    async def _run_job(self, job: ScheduledJob) -> None:
        try:
            result = await job.operation()
        except asyncio.CancelledError:
            if not job.future.done():
                job.future.cancel()
            raise
        except Exception as e:
            self._total_failed += 1
            if self.metrics_collector:
                self.metrics_collector.inc_counter(
                    JOBS_FAILED_TOTAL, labels={"scheduler": self.name}
                )
            if not job.future.done():
                job.future.set_exception(e)
        else:
            self._total_completed += 1
            if self.metrics_collector:
                self.metrics_collector.inc_counter(
                    JOBS_COMPLETED_TOTAL, labels={"scheduler": self.name}
                )
            if not job.future.done():
                job.future.set_result(result)
        finally:
            self._in_flight -= 1
            self._wakeup.set()
            self._report_state()

    def _report_state(self) -> None:
        if not self.metrics_collector:
            return
        labels = {"scheduler": self.name}
        self.metrics_collector.set_gauge(JOBS_IN_FLIGHT, self._in_flight, labels=labels)
        self.metrics_collector.set_gauge(QUEUE_DEPTH, len(self._queue), labels=labels)
        self.metrics_collector.set_gauge(
            RESERVOIR_TOKENS, self._reservoir, labels=labels
        )


__all__ = ["TokenBucketScheduler"]
