"""
Unit tests for RetryOrchestrator and retry_operation.

Tests cover:
- Attempt counting with classified and unclassified errors
- Fixed delay between attempts
- Per-call overrides and custom classifiers
- Cancellation, logging and metrics
"""

import asyncio
import logging
from unittest.mock import AsyncMock, Mock, call, patch

import pytest
from prometheus_client import CollectorRegistry

from rapid_ratelimit.exceptions import ConfigurationError, NoObjectGeneratedError
from rapid_ratelimit.observability import (
    RETRIES_EXHAUSTED_TOTAL,
    RETRY_ATTEMPTS_TOTAL,
    UnifiedMetricsCollector,
)
from rapid_ratelimit.retry import RetryConfig, RetryOrchestrator, retry_operation


@pytest.fixture
def orchestrator() -> RetryOrchestrator:
    return RetryOrchestrator(RetryConfig(max_retries=3, delay=0))


class TestAttemptCounting:
    """How many times the operation is invoked."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self, orchestrator):
        operation = AsyncMock(return_value="recipe")

        assert await orchestrator.retry(operation) == "recipe"
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_always_retryable_error_invoked_max_retries_times(self, orchestrator):
        """The final error is re-raised after exactly max_retries attempts."""
        error = TimeoutError("model timed out")
        operation = AsyncMock(side_effect=error)

        with pytest.raises(TimeoutError) as exc_info:
            await orchestrator.retry(operation)

        assert exc_info.value is error
        assert operation.await_count == 3

    @pytest.mark.asyncio
    async def test_non_retryable_error_invoked_once(self, orchestrator):
        error = ValueError("bad prompt")
        operation = AsyncMock(side_effect=error)

        with pytest.raises(ValueError) as exc_info:
            await orchestrator.retry(operation)

        assert exc_info.value is error
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_unrestricted_retries_any_error(self):
        orchestrator = RetryOrchestrator(
            RetryConfig(retry_only_classified_errors=False, max_retries=3, delay=0)
        )
        operation = AsyncMock(side_effect=ValueError("bad prompt"))

        with pytest.raises(ValueError):
            await orchestrator.retry(operation)

        assert operation.await_count == 3

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(self, orchestrator):
        operation = AsyncMock(
            side_effect=[NoObjectGeneratedError(), TimeoutError(), {"title": "Soup"}]
        )

        assert await orchestrator.retry(operation) == {"title": "Soup"}
        assert operation.await_count == 3

    @pytest.mark.asyncio
    async def test_single_attempt(self):
        orchestrator = RetryOrchestrator(RetryConfig(max_retries=1, delay=0))
        operation = AsyncMock(side_effect=TimeoutError())

        with pytest.raises(TimeoutError):
            await orchestrator.retry(operation)

        assert operation.await_count == 1


class TestDelay:
    """The wait between attempts is fixed."""

    @pytest.mark.asyncio
    async def test_fixed_delay_between_attempts(self):
        orchestrator = RetryOrchestrator(RetryConfig(max_retries=3, delay=0.5))
        operation = AsyncMock(side_effect=TimeoutError())

        with patch(
            "rapid_ratelimit.retry.orchestrator.asyncio.sleep", new=AsyncMock()
        ) as sleep:
            with pytest.raises(TimeoutError):
                await orchestrator.retry(operation)

        assert sleep.await_args_list == [call(0.5), call(0.5)]

    @pytest.mark.asyncio
    async def test_no_delay_after_final_attempt(self):
        orchestrator = RetryOrchestrator(RetryConfig(max_retries=2, delay=0.5))
        operation = AsyncMock(side_effect=ValueError("fatal"))

        with patch(
            "rapid_ratelimit.retry.orchestrator.asyncio.sleep", new=AsyncMock()
        ) as sleep:
            with pytest.raises(ValueError):
                await orchestrator.retry(operation)

        sleep.assert_not_awaited()


class TestOverridesAndClassifier:
    """Per-call arguments and pluggable classification."""

    @pytest.mark.asyncio
    async def test_per_call_overrides(self, orchestrator):
        operation = AsyncMock(side_effect=ValueError("bad"))

        with pytest.raises(ValueError):
            await orchestrator.retry(
                operation, retry_only_classified_errors=False, max_retries=5, delay=0
            )

        assert operation.await_count == 5

    @pytest.mark.asyncio
    async def test_invalid_override_rejected(self, orchestrator):
        operation = AsyncMock()

        with pytest.raises(ConfigurationError):
            await orchestrator.retry(operation, max_retries=0)

        operation.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_custom_classifier_consulted(self):
        classifier = Mock()
        classifier.is_retryable.return_value = True
        orchestrator = RetryOrchestrator(
            RetryConfig(max_retries=2, delay=0), classifier=classifier
        )
        error = KeyError("rate limited")
        operation = AsyncMock(side_effect=error)

        with pytest.raises(KeyError):
            await orchestrator.retry(operation)

        assert operation.await_count == 2
        classifier.is_retryable.assert_called_with(error)

    def test_is_retryable_delegates(self, orchestrator):
        assert orchestrator.is_retryable(TimeoutError())
        assert not orchestrator.is_retryable(ValueError())


class TestCancellation:
    """Cancellation always propagates."""

    @pytest.mark.asyncio
    async def test_cancelled_error_not_retried(self):
        orchestrator = RetryOrchestrator(
            RetryConfig(retry_only_classified_errors=False, max_retries=3, delay=0)
        )
        operation = AsyncMock(side_effect=asyncio.CancelledError())

        with pytest.raises(asyncio.CancelledError):
            await orchestrator.retry(operation)

        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_cancel_during_delay(self):
        orchestrator = RetryOrchestrator(RetryConfig(max_retries=3, delay=10.0))
        operation = AsyncMock(side_effect=TimeoutError())

        task = asyncio.create_task(orchestrator.retry(operation))
        await asyncio.sleep(0.02)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert operation.await_count == 1


class TestLoggingAndMetrics:
    """Observability of retries."""

    @pytest.mark.asyncio
    async def test_warning_per_retry_and_error_on_give_up(self, orchestrator, caplog):
        operation = AsyncMock(side_effect=TimeoutError("slow"))

        with caplog.at_level(logging.WARNING, logger="rapid_ratelimit.retry.orchestrator"):
            with pytest.raises(TimeoutError):
                await orchestrator.retry(operation)

        levels = [record.levelno for record in caplog.records]
        assert levels == [logging.WARNING, logging.WARNING, logging.ERROR]
        assert "attempt 1 of 3" in caplog.records[0].getMessage()

    @pytest.mark.asyncio
    async def test_metrics_recorded(self):
        collector = UnifiedMetricsCollector(registry=CollectorRegistry())
        orchestrator = RetryOrchestrator(
            RetryConfig(max_retries=3, delay=0), metrics_collector=collector
        )
        operation = AsyncMock(side_effect=TimeoutError())

        with pytest.raises(TimeoutError):
            await orchestrator.retry(operation)

        labels = {"error_type": "TimeoutError"}
        assert collector.get_counter(RETRY_ATTEMPTS_TOTAL, labels) == 2
        assert collector.get_counter(RETRIES_EXHAUSTED_TOTAL, labels) == 1


class TestRetryOperation:
    """The module-level convenience function."""

    @pytest.mark.asyncio
    async def test_defaults_restrict_to_classified_errors(self):
        operation = AsyncMock(side_effect=ValueError("fatal"))

        with pytest.raises(ValueError):
            await retry_operation(operation, delay=0)

        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_retries_classified_errors(self):
        operation = AsyncMock(side_effect=[TimeoutError(), "ok"])

        assert await retry_operation(operation, max_retries=3, delay=0) == "ok"
        assert operation.await_count == 2
