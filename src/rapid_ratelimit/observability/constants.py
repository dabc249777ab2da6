# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metric name constants following Prometheus naming conventions.

This module provides standardized metric names for all observability
in the rapid-ratelimit library. All metric names use the `rapid_rl_`
prefix for Prometheus compatibility.

Naming Conventions:
    - Counter metrics end with `_total`
    - Histogram metrics for time end with `_seconds`
    - Gauges use present-tense descriptive names

Label Best Practices:
    To prevent label cardinality explosion, use only:
    - `limiter` - Name given to a SlidingWindowLimiter (categorical)
    - `scheduler` - Name given to a TokenBucketScheduler (categorical)
    - `error_type` - Exception class name (bounded by your code base)
    - `outcome` - Batch item outcome (enum: success, failure)

    NEVER use per-request or per-item identifiers as label values.

Usage:
    >>> from rapid_ratelimit.observability.constants import JOBS_SCHEDULED_TOTAL
    >>> print(JOBS_SCHEDULED_TOTAL)
    'rapid_rl_jobs_scheduled_total'
"""


# =============================================================================
# Global Prefix
# =============================================================================

METRIC_PREFIX = "rapid_rl"
"""Prefix for all Prometheus metrics in this library."""


# =============================================================================
# Sliding Window Limiter Metrics (limiter/sliding_window.py)
# =============================================================================

ADMISSIONS_TOTAL = f"{METRIC_PREFIX}_admissions_total"
"""Total admissions granted by a sliding window limiter."""

WINDOW_RESETS_TOTAL = f"{METRIC_PREFIX}_window_resets_total"
"""Total times a limiter exhausted its window and waited for it to reset."""

ADMISSION_WAIT_SECONDS = f"{METRIC_PREFIX}_admission_wait_seconds"
"""Time a caller spent suspended before admission (histogram)."""


# =============================================================================
# Token Bucket Scheduler Metrics (scheduler/token_bucket.py)
# =============================================================================

JOBS_SCHEDULED_TOTAL = f"{METRIC_PREFIX}_jobs_scheduled_total"
"""Total jobs submitted to a scheduler."""

JOBS_COMPLETED_TOTAL = f"{METRIC_PREFIX}_jobs_completed_total"
"""Total dispatched jobs whose operation returned a value."""

JOBS_FAILED_TOTAL = f"{METRIC_PREFIX}_jobs_failed_total"
"""Total dispatched jobs whose operation raised."""

JOBS_DROPPED_TOTAL = f"{METRIC_PREFIX}_jobs_dropped_total"
"""Total queued jobs abandoned because the scheduler was stopped."""

JOBS_IN_FLIGHT = f"{METRIC_PREFIX}_jobs_in_flight"
"""Number of operations currently executing."""

QUEUE_DEPTH = f"{METRIC_PREFIX}_queue_depth"
"""Number of jobs waiting for admission."""

RESERVOIR_TOKENS = f"{METRIC_PREFIX}_reservoir_tokens"
"""Tokens left in the reservoir for the current interval."""


# =============================================================================
# Retry Metrics (retry/orchestrator.py)
# =============================================================================

RETRY_ATTEMPTS_TOTAL = f"{METRIC_PREFIX}_retry_attempts_total"
"""Total re-attempts made after a failed operation."""

RETRIES_EXHAUSTED_TOTAL = f"{METRIC_PREFIX}_retries_exhausted_total"
"""Total operations that failed for good (out of attempts or not retryable)."""


# =============================================================================
# Batch Metrics (batch/coordinator.py)
# =============================================================================

BATCH_ITEMS_TOTAL = f"{METRIC_PREFIX}_batch_items_total"
"""Total batch items processed, labelled by outcome."""


# =============================================================================
# Histogram Buckets
# =============================================================================

WAIT_BUCKETS: list[float] = [
    0.001,
    0.005,
    0.01,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
    30.0,
    60.0,
    120.0,
]
"""Buckets for admission wait times, from sub-millisecond to a full minute window."""


__all__ = [
    "ADMISSIONS_TOTAL",
    "ADMISSION_WAIT_SECONDS",
    "BATCH_ITEMS_TOTAL",
    "JOBS_COMPLETED_TOTAL",
    "JOBS_DROPPED_TOTAL",
    "JOBS_FAILED_TOTAL",
    "JOBS_IN_FLIGHT",
    "JOBS_SCHEDULED_TOTAL",
    "METRIC_PREFIX",
    "QUEUE_DEPTH",
    "RESERVOIR_TOKENS",
    "RETRIES_EXHAUSTED_TOTAL",
    "RETRY_ATTEMPTS_TOTAL",
    "WAIT_BUCKETS",
    "WINDOW_RESETS_TOTAL",
]
