# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Rapid Rate Limiter - Client-side rate limiting for model API calls.

This library keeps an application inside a provider's request quotas while
still getting useful parallelism out of it.

Key Features:
    - Serialized sliding-window limiter with minimum request spacing
    - Token bucket scheduler bounding concurrency and throughput
    - Retry orchestration driven by an error classifier
    - Batch processing that never aborts on a single failure
    - Prometheus metrics through a unified collector

Quick Start:
    >>> from rapid_ratelimit import (
    ...     BatchCoordinator, RetryOrchestrator, SchedulerConfig, TokenBucketScheduler,
    ... )
    >>>
    >>> scheduler = TokenBucketScheduler(SchedulerConfig(max_concurrent=5, interval_cap=10))
    >>> retry = RetryOrchestrator()
    >>>
    >>> async def describe(recipe):
    ...     return await retry.retry(lambda: call_model(recipe))
    >>>
    >>> async with scheduler:
    ...     result = await BatchCoordinator(scheduler).process_all(recipes, describe)

Main Exports:
    - SlidingWindowLimiter, RateWindowConfig: Serialized window limiting
    - TokenBucketScheduler, SchedulerConfig: Concurrent scheduling
    - RetryOrchestrator, RetryConfig, DefaultErrorClassifier: Retries
    - BatchCoordinator, BatchResult, ProcessingFailure: Batch processing
    - UnifiedMetricsCollector: Metrics

Version: 1.0.0
"""

__version__ = "1.0.0"

from .batch import BatchCoordinator
from .exceptions import (
    ConfigurationError,
    NoObjectGeneratedError,
    OperationError,
    RateLimiterError,
    SchedulerStoppedError,
)
from .limiter import RateWindowConfig, SlidingWindowLimiter
from .observability import (
    UnifiedMetricsCollector,
    get_metrics_collector,
    reset_metrics_collector,
)
from .protocols import ErrorClassifierProtocol
from .retry import (
    DefaultErrorClassifier,
    RetryConfig,
    RetryOrchestrator,
    retry_operation,
    run_with_timeout,
)
from .scheduler import SchedulerConfig, TokenBucketScheduler
from .types import BatchResult, ProcessingFailure, ScheduledJob

__all__ = [
    # Batch
    "BatchCoordinator",
    "BatchResult",
    # Exceptions
    "ConfigurationError",
    "DefaultErrorClassifier",
    # Protocols
    "ErrorClassifierProtocol",
    "NoObjectGeneratedError",
    "OperationError",
    "ProcessingFailure",
    "RateLimiterError",
    # Limiter
    "RateWindowConfig",
    # Retry
    "RetryConfig",
    "RetryOrchestrator",
    "ScheduledJob",
    # Scheduler
    "SchedulerConfig",
    "SchedulerStoppedError",
    "SlidingWindowLimiter",
    "TokenBucketScheduler",
    # Observability
    "UnifiedMetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
    "retry_operation",
    "run_with_timeout",
]
