# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Sliding window limiter for strictly serialized call sites.

The limiter bounds how many admissions happen inside a trailing time
window and keeps a minimum gap between consecutive admissions. It is a
single-lane primitive: callers take turns, and each caller is suspended
(without blocking the event loop) until its admission is legal.
"""

import asyncio
import logging
import time
from collections import deque
from typing import Any

from typing_extensions import Self

from ..observability.collector import UnifiedMetricsCollector, resolve_collector
from ..observability.constants import (
    ADMISSION_WAIT_SECONDS,
    ADMISSIONS_TOTAL,
    WINDOW_RESETS_TOTAL,
)
from .config import RateWindowConfig

logger = logging.getLogger(__name__)


class SlidingWindowLimiter:
    """
    Serialize access so that at most ``max_requests_per_window`` admissions
    occur in any trailing ``rate_limit_window``, with consecutive admissions
    at least ``min_request_interval`` apart.

    When the window is full the limiter waits until the oldest admission
    leaves the window (plus ``reset_buffer``) and then forgets the whole
    request log instead of re-pruning it. Concurrent callers are admitted
    one at a time in the order they arrived.

    Example:
        >>> limiter = SlidingWindowLimiter(RateWindowConfig(
        ...     min_request_interval=2.0,
        ...     rate_limit_window=60.0,
        ...     max_requests_per_window=20,
        ...     reset_buffer=1.0,
        ... ))
        >>> for prompt in prompts:
        ...     await limiter.acquire()
        ...     await call_model(prompt)
    """

    def __init__(
        self,
        config: RateWindowConfig,
        name: str = "default",
        metrics_enabled: bool = False,
        metrics_collector: UnifiedMetricsCollector | None = None,
    ) -> None:
        """
        Initialize the limiter.

        Args:
            config: Window, spacing and buffer settings
            name: Label used in logs and metrics
            metrics_enabled: Report to the global metrics collector
            metrics_collector: Explicit collector to report to (overrides
                metrics_enabled)
        """
        self.config = config
        self.name = name
        self.metrics_collector = resolve_collector(metrics_enabled, metrics_collector)

        self._request_times: deque[float] = deque()
        self._last_admission: float | None = None
        self._admission_lock = asyncio.Lock()
        self._admissions = 0
        self._window_resets = 0

    @property
    def request_count(self) -> int:
        """Number of admissions currently recorded in the request log."""
        return len(self._request_times)

    @property
    def last_admission(self) -> float | None:
        """Monotonic timestamp of the most recent admission, if any."""
        return self._last_admission

    async def acquire(self) -> None:
        """
        Wait until this caller may proceed, then record the admission.

        Never raises except for cancellation. The longest single wait is
        bounded by ``rate_limit_window + reset_buffer`` plus the minimum
        request interval.
        """
        async with self._admission_lock:
            started = time.monotonic()
            await self._wait_for_admission()
            admitted_at = time.monotonic()

            self._last_admission = admitted_at
            self._request_times.append(admitted_at)
            self._admissions += 1

        waited = admitted_at - started
        logger.debug(
            f"Limiter '{self.name}' admitted request after {waited:.3f}s "
            f"({len(self._request_times)}/{self.config.max_requests_per_window} in window)"
        )
        if self.metrics_collector:
            labels = {"limiter": self.name}
            self.metrics_collector.inc_counter(ADMISSIONS_TOTAL, labels=labels)
            self.metrics_collector.observe_histogram(
                ADMISSION_WAIT_SECONDS, waited, labels=labels
            )

    async def _wait_for_admission(self) -> None:
        config = self.config
        now = time.monotonic()

        window_start = now - config.rate_limit_window
        while self._request_times and self._request_times[0] <= window_start:
            self._request_times.popleft()

        if len(self._request_times) >= config.max_requests_per_window:
            oldest = self._request_times[0]
            wait_time = config.rate_limit_window - (now - oldest) + config.reset_buffer
            logger.info(
                f"Limiter '{self.name}' reached {config.max_requests_per_window} "
                f"requests per {config.rate_limit_window}s window, "
                f"waiting {wait_time:.2f}s for it to reset"
            )
            self._window_resets += 1
            if self.metrics_collector:
                self.metrics_collector.inc_counter(
                    WINDOW_RESETS_TOTAL, labels={"limiter": self.name}
                )
            await asyncio.sleep(wait_time)
            self._request_times.clear()

        # The gap is measured against the timestamp taken before any window wait
        if self._last_admission is not None:
            gap = now - self._last_admission
            if gap < config.min_request_interval:
                await asyncio.sleep(config.min_request_interval - gap)

    async def __aenter__(self) -> Self:
        """Acquire admission for the body of an ``async with`` block."""
        await self.acquire()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Admissions are recorded on entry; nothing to release."""
        return None

    def get_metrics(self) -> dict[str, Any]:
        """
        Get a snapshot of the limiter's state.

        Returns:
            Dictionary containing the limiter name, the number of admissions
            in the current window, the total admissions and window resets.
        """
        return {
            "limiter": self.name,
            "requests_in_window": len(self._request_times),
            "max_requests_per_window": self.config.max_requests_per_window,
            "total_admissions": self._admissions,
            "window_resets": self._window_resets,
        }


__all__ = ["SlidingWindowLimiter"]
