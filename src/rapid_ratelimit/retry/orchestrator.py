# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Retry orchestration with a fixed delay between attempts.

The orchestrator is the only component that intercepts operation errors,
and it only does so to decide whether to try again. Once attempts run out,
or a failure is classified as not retryable, the original exception is
re-raised unchanged.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ..observability.collector import UnifiedMetricsCollector, resolve_collector
from ..observability.constants import RETRIES_EXHAUSTED_TOTAL, RETRY_ATTEMPTS_TOTAL
from ..protocols.classifier import ErrorClassifierProtocol
from .classifier import DefaultErrorClassifier
from .config import RetryConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryOrchestrator:
    """
    Re-invoke a fallible async operation up to ``max_retries`` times.

    By default only failures the classifier marks as retryable are
    retried; any other failure is raised on its first occurrence. With
    ``retry_only_classified_errors=False`` every failure is retried.

    Attributes:
        config: Default retry settings
        classifier: Decides which failures are retryable

    Example:
        >>> orchestrator = RetryOrchestrator(RetryConfig(max_retries=3, delay=1.0))
        >>> recipe = await orchestrator.retry(lambda: generate_recipe(ingredients))
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        classifier: ErrorClassifierProtocol | None = None,
        metrics_enabled: bool = False,
        metrics_collector: UnifiedMetricsCollector | None = None,
    ) -> None:
        """
        Initialize the RetryOrchestrator.

        Args:
            config: Default retry settings (RetryConfig() when omitted)
            classifier: Error classifier (DefaultErrorClassifier when omitted)
            metrics_enabled: Report to the global metrics collector
            metrics_collector: Explicit collector to report to
        """
        self.config = config if config is not None else RetryConfig()
        self.classifier: ErrorClassifierProtocol = (
            classifier if classifier is not None else DefaultErrorClassifier()
        )
        self.metrics_collector = resolve_collector(metrics_enabled, metrics_collector)

    def is_retryable(self, error: BaseException) -> bool:
        """Check whether the classifier considers ``error`` transient."""
        return bool(self.classifier.is_retryable(error))

    async def retry(
        self,
        operation: Callable[[], Awaitable[T]],
        retry_only_classified_errors: bool | None = None,
        max_retries: int | None = None,
        delay: float | None = None,
    ) -> T:
        """
        Run ``operation`` until it succeeds or retrying stops.

        Per-call arguments override the orchestrator's config.

        Args:
            operation: Zero-argument async callable to attempt
            retry_only_classified_errors: Only retry classified failures
            max_retries: Total number of attempts
            delay: Seconds to wait between attempts

        Returns:
            The result of the first successful attempt

        Raises:
            Exception: The error of the final attempt, or the first error
                that is not retryable
        """
        config = RetryConfig(
            retry_only_classified_errors=(
                self.config.retry_only_classified_errors
                if retry_only_classified_errors is None
                else retry_only_classified_errors
            ),
            max_retries=self.config.max_retries if max_retries is None else max_retries,
            delay=self.config.delay if delay is None else delay,
        )

        for attempt in range(1, config.max_retries + 1):
            try:
                return await operation()
            except asyncio.CancelledError:
                raise  # Never retry cancellation
            except Exception as e:
                should_retry = (
                    not config.retry_only_classified_errors or self.is_retryable(e)
                )
                error_type = type(e).__name__

                if not should_retry or attempt >= config.max_retries:
                    reason = "not retryable" if not should_retry else "out of attempts"
                    logger.error(
                        f"Operation failed on attempt {attempt} of "
                        f"{config.max_retries} ({reason}): {error_type}: {e}"
                    )
                    if self.metrics_collector:
                        self.metrics_collector.inc_counter(
                            RETRIES_EXHAUSTED_TOTAL, labels={"error_type": error_type}
                        )
                    raise

                logger.warning(
                    f"Operation failed on attempt {attempt} of {config.max_retries}, "
                    f"retrying in {config.delay}s: {error_type}: {e}"
                )
                if self.metrics_collector:
                    self.metrics_collector.inc_counter(
                        RETRY_ATTEMPTS_TOTAL, labels={"error_type": error_type}
                    )
                await asyncio.sleep(config.delay)

        # max_retries >= 1 is enforced by RetryConfig, so the loop always returns or raises
        raise AssertionError("unreachable")


_default_orchestrator: RetryOrchestrator | None = None


def get_default_orchestrator() -> RetryOrchestrator:
    """Return the shared orchestrator used by ``retry_operation``."""
    global _default_orchestrator
    if _default_orchestrator is None:
        _default_orchestrator = RetryOrchestrator()
    return _default_orchestrator


async def retry_operation(
    operation: Callable[[], Awaitable[T]],
    retry_only_classified_errors: bool = True,
    max_retries: int = 3,
    delay: float = 1.0,
) -> T:
    """
    Retry ``operation`` with the default classifier.

    Convenience wrapper around ``RetryOrchestrator.retry``.

    Example:
        >>> result = await retry_operation(lambda: run_task(messages), max_retries=5)
    """
    return await get_default_orchestrator().retry(
        operation,
        retry_only_classified_errors=retry_only_classified_errors,
        max_retries=max_retries,
        delay=delay,
    )


__all__ = ["RetryOrchestrator", "get_default_orchestrator", "retry_operation"]
