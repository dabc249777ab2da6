# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Observability and metrics for rapid-ratelimit.

Classes:
    UnifiedMetricsCollector: Unified metrics collector supporting dict and Prometheus.
    MetricDefinition: Schema for a pre-defined metric.

Functions:
    get_metrics_collector: Get the global metrics collector singleton.
    reset_metrics_collector: Reset the global metrics collector singleton.
    resolve_collector: Pick the collector a component reports to.

Constants:
    All metric name constants from the constants module.
"""

from .collector import (
    METRIC_DEFINITIONS,
    MetricDefinition,
    UnifiedMetricsCollector,
    get_metrics_collector,
    reset_metrics_collector,
    resolve_collector,
)
from .constants import (
    ADMISSION_WAIT_SECONDS,
    ADMISSIONS_TOTAL,
    BATCH_ITEMS_TOTAL,
    JOBS_COMPLETED_TOTAL,
    JOBS_DROPPED_TOTAL,
    JOBS_FAILED_TOTAL,
    JOBS_IN_FLIGHT,
    JOBS_SCHEDULED_TOTAL,
    METRIC_PREFIX,
    QUEUE_DEPTH,
    RESERVOIR_TOKENS,
    RETRIES_EXHAUSTED_TOTAL,
    RETRY_ATTEMPTS_TOTAL,
    WAIT_BUCKETS,
    WINDOW_RESETS_TOTAL,
)

__all__ = [
    "ADMISSIONS_TOTAL",
    "ADMISSION_WAIT_SECONDS",
    "BATCH_ITEMS_TOTAL",
    "JOBS_COMPLETED_TOTAL",
    "JOBS_DROPPED_TOTAL",
    "JOBS_FAILED_TOTAL",
    "JOBS_IN_FLIGHT",
    "JOBS_SCHEDULED_TOTAL",
    "METRIC_DEFINITIONS",
    "METRIC_PREFIX",
    "QUEUE_DEPTH",
    "RESERVOIR_TOKENS",
    "RETRIES_EXHAUSTED_TOTAL",
    "RETRY_ATTEMPTS_TOTAL",
    "WAIT_BUCKETS",
    "WINDOW_RESETS_TOTAL",
    "MetricDefinition",
    "UnifiedMetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
    "resolve_collector",
]
