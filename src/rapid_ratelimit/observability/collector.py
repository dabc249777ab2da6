# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metrics collection for limiters, schedulers, retries and batches.

UnifiedMetricsCollector keeps every metric twice: as plain Python values
that can be snapshotted into JSON-friendly dicts at any time, and as
prometheus_client objects registered in a CollectorRegistry for scraping.
Components never talk to prometheus_client directly.

Features:
    1. Counters, gauges and histograms guarded by a reentrant lock
    2. Prometheus objects created on first use from METRIC_DEFINITIONS
    3. Snapshots via get_metrics() and get_flat_metrics()
    4. A cap on distinct label sets per metric
    5. An optional scrape endpoint via start_http_server()

Usage:
    >>> from rapid_ratelimit.observability.collector import get_metrics_collector
    >>> collector = get_metrics_collector()
    >>> collector.inc_counter('rapid_rl_jobs_scheduled_total',
    ...                       labels={'scheduler': 'default'})
    >>> collector.get_counter('rapid_rl_jobs_scheduled_total', {'scheduler': 'default'})
    1
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Any, ClassVar

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    start_http_server,
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
    QUEUE_DEPTH,
    RESERVOIR_TOKENS,
    RETRIES_EXHAUSTED_TOTAL,
    RETRY_ATTEMPTS_TOTAL,
    WAIT_BUCKETS,
    WINDOW_RESETS_TOTAL,
)

logger = logging.getLogger(__name__)

# Most recent observations retained per histogram series for snapshots
MAX_HISTOGRAM_OBSERVATIONS = 10000

_PROMETHEUS_TYPES: dict[str, Any] = {
    "counter": Counter,
    "gauge": Gauge,
    "histogram": Histogram,
}


@dataclass
class MetricDefinition:
    """
    Name, type, help text and label names of a library metric.

    Histograms may carry their own bucket boundaries; everything else
    leaves ``buckets`` unset.
    """

    name: str
    metric_type: str  # counter | gauge | histogram
    description: str
    label_names: tuple[str, ...] = ()
    buckets: list[float] | None = None


def _define(
    name: str,
    metric_type: str,
    description: str,
    label: str,
    buckets: list[float] | None = None,
) -> tuple[str, MetricDefinition]:
    return name, MetricDefinition(name, metric_type, description, (label,), buckets)


METRIC_DEFINITIONS: dict[str, MetricDefinition] = dict(
    [
        # Sliding window limiter
        _define(ADMISSIONS_TOTAL, "counter", "Admissions granted", "limiter"),
        _define(WINDOW_RESETS_TOTAL, "counter", "Waits for a full window to reset", "limiter"),
        _define(
            ADMISSION_WAIT_SECONDS,
            "histogram",
            "Seconds a caller waited before admission",
            "limiter",
            buckets=WAIT_BUCKETS,
        ),
        # Token bucket scheduler
        _define(JOBS_SCHEDULED_TOTAL, "counter", "Jobs submitted", "scheduler"),
        _define(JOBS_COMPLETED_TOTAL, "counter", "Jobs whose operation returned", "scheduler"),
        _define(JOBS_FAILED_TOTAL, "counter", "Jobs whose operation raised", "scheduler"),
        _define(JOBS_DROPPED_TOTAL, "counter", "Queued jobs rejected by stop()", "scheduler"),
        _define(JOBS_IN_FLIGHT, "gauge", "Operations currently executing", "scheduler"),
        _define(QUEUE_DEPTH, "gauge", "Jobs waiting for admission", "scheduler"),
        _define(RESERVOIR_TOKENS, "gauge", "Tokens left in the current interval", "scheduler"),
        # Retry orchestrator
        _define(RETRY_ATTEMPTS_TOTAL, "counter", "Failed attempts that were retried", "error_type"),
        _define(
            RETRIES_EXHAUSTED_TOTAL,
            "counter",
            "Operations that failed for good",
            "error_type",
        ),
        # Batch coordinator
        _define(BATCH_ITEMS_TOTAL, "counter", "Batch items by outcome", "outcome"),
    ]
)


def _series_key(labels: dict[str, str] | None) -> str:
    """Render a label set as ``k1=v1,k2=v2`` with keys sorted."""
    if not labels:
        return ""
    return ",".join(f"{key}={labels[key]}" for key in sorted(labels))


def _summarize(observations: deque[float]) -> dict[str, float]:
    total = sum(observations)
    return {
        "count": len(observations),
        "sum": total,
        "avg": total / len(observations),
        "min": min(observations),
        "max": max(observations),
    }


class UnifiedMetricsCollector:
    """
    Record metrics as plain values and mirror them into Prometheus.

    Thread Safety:
        Value updates and snapshots hold a reentrant lock, so a collector
        can be shared between the event loop and scrape threads.

    Cardinality Protection:
        At most MAX_LABEL_COMBINATIONS label sets are tracked per metric.
        Updates for further label sets are dropped with a warning.

    Example:
        >>> collector = UnifiedMetricsCollector(registry=CollectorRegistry())
        >>> scheduler = TokenBucketScheduler(config, metrics_collector=collector)
        >>> collector.get_flat_metrics()
    """

    MAX_LABEL_COMBINATIONS: ClassVar[int] = 1000

    def __init__(
        self,
        enable_prometheus: bool = True,
        registry: CollectorRegistry | None = None,
    ) -> None:
        """
        Args:
            enable_prometheus: Mirror updates into prometheus_client objects
            registry: Registry to register them in (the global REGISTRY by
                default; tests pass a private one)
        """
        self._enable_prometheus = enable_prometheus
        self._registry = REGISTRY if registry is None else registry
        self._lock = threading.RLock()

        self._counters: defaultdict[str, dict[str, int]] = defaultdict(dict)
        self._gauges: defaultdict[str, dict[str, float]] = defaultdict(dict)
        self._histograms: defaultdict[str, dict[str, deque[float]]] = defaultdict(dict)
        self._seen_labels: defaultdict[str, set[str]] = defaultdict(set)

        self._prom_metrics: dict[str, Any] = {}
        self._server_running = False

        logger.debug(
            f"{self.__class__.__name__} created "
            f"(prometheus={'on' if enable_prometheus else 'off'})"
        )

    # === Updates ===

    def inc_counter(
        self,
        name: str,
        value: int = 1,
        labels: dict[str, str] | None = None,
    ) -> None:
        """
        Add ``value`` to a counter.

        Raises:
            ValueError: If value is negative
        """
        if value < 0:
            raise ValueError("Counter increment must be non-negative")
        with self._lock:
            key = self._admit(name, labels)
            if key is None:
                return
            series = self._counters[name]
            series[key] = series.get(key, 0) + value
        self._mirror("counter", name, labels, "inc", value)

    def set_gauge(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None:
        with self._lock:
            key = self._admit(name, labels)
            if key is None:
                return
            self._gauges[name][key] = value
        self._mirror("gauge", name, labels, "set", value)

    def observe_histogram(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None:
        with self._lock:
            key = self._admit(name, labels)
            if key is None:
                return
            series = self._histograms[name]
            if key not in series:
                series[key] = deque(maxlen=MAX_HISTOGRAM_OBSERVATIONS)
            series[key].append(value)
        self._mirror("histogram", name, labels, "observe", value)

    def _admit(self, name: str, labels: dict[str, str] | None) -> str | None:
        """Return the series key for ``labels``, or None past the cardinality cap."""
        key = _series_key(labels)
        seen = self._seen_labels[name]
        if key in seen:
            return key
        if len(seen) >= self.MAX_LABEL_COMBINATIONS:
            logger.warning(
                f"Metric {name} already tracks {self.MAX_LABEL_COMBINATIONS} "
                f"label sets; ignoring {key}"
            )
            return None
        seen.add(key)
        return key

    # === Prometheus mirroring ===

    def _mirror(
        self,
        metric_type: str,
        name: str,
        labels: dict[str, str] | None,
        method: str,
        value: float,
    ) -> None:
        metric = self._prometheus_metric(name, metric_type, labels)
        if metric is None:
            return
        try:
            target = metric.labels(**labels) if labels else metric
            getattr(target, method)(value)
        except ValueError as e:
            logger.debug(f"Prometheus {metric_type} {name} not updated: {e}")

    def _prometheus_metric(
        self, name: str, metric_type: str, labels: dict[str, str] | None
    ) -> Any | None:
        """Return the Prometheus object for ``name``, registering it on first use."""
        if not self._enable_prometheus:
            return None

        with self._lock:
            if name in self._prom_metrics:
                return self._prom_metrics[name]

            definition = METRIC_DEFINITIONS.get(name)
            if definition is None or definition.metric_type != metric_type:
                definition = MetricDefinition(
                    name, metric_type, f"Dynamic {metric_type}: {name}", tuple(sorted(labels or {}))
                )

            kwargs: dict[str, Any] = {"registry": self._registry}
            if metric_type == "histogram":
                kwargs["buckets"] = definition.buckets or WAIT_BUCKETS

            try:
                metric = _PROMETHEUS_TYPES[metric_type](
                    name, definition.description, list(definition.label_names), **kwargs
                )
            except ValueError as e:
                # Usually a name already registered in a shared registry
                logger.warning(f"Prometheus {metric_type} {name} not registered: {e}")
                metric = None

            self._prom_metrics[name] = metric
            return metric

    # === Reads ===

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> int:
        """Current value of one counter series (0 if never incremented)."""
        with self._lock:
            return self._counters.get(name, {}).get(_series_key(labels), 0)

    def get_gauge(self, name: str, labels: dict[str, str] | None = None) -> float:
        """Current value of one gauge series (0.0 if never set)."""
        with self._lock:
            return self._gauges.get(name, {}).get(_series_key(labels), 0.0)

    def get_metrics(self) -> dict[str, Any]:
        """
        Snapshot every metric, grouped by kind.

        Returns:
            ``{"counters": {name: {series_key: value}}, "gauges": {...},
            "histograms": {name: {series_key: {count, sum, avg, min, max}}}}``
            where series_key is ``""`` for unlabeled metrics.
        """
        with self._lock:
            return {
                "counters": {name: dict(series) for name, series in self._counters.items()},
                "gauges": {name: dict(series) for name, series in self._gauges.items()},
                "histograms": {
                    name: {key: _summarize(obs) for key, obs in series.items() if obs}
                    for name, series in self._histograms.items()
                },
            }

    def get_flat_metrics(self) -> dict[str, Any]:
        """
        Counters and gauges keyed ``name`` or ``name{k=v,...}``.
        """
        flat: dict[str, Any] = {}
        with self._lock:
            for store in (self._counters, self._gauges):
                for name, series in store.items():
                    for key, value in series.items():
                        flat[f"{name}{{{key}}}" if key else name] = value
        return flat

    def reset(self) -> None:
        """Forget all recorded values. Prometheus objects stay registered."""
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._histograms.clear()
            self._seen_labels.clear()
        logger.debug("Metrics collector reset")

    # === Scrape endpoint ===

    def start_http_server(self, host: str = "127.0.0.1", port: int = 9090) -> bool:
        """
        Serve the registry for Prometheus scraping from a daemon thread.

        Returns:
            True if the server is (already) running, False if it could not bind
        """
        if self._server_running:
            logger.warning("Prometheus server already running")
            return True
        try:
            start_http_server(port, addr=host, registry=self._registry)
        except OSError as e:
            logger.error(f"Could not start Prometheus server on {host}:{port}: {e}")
            return False
        self._server_running = True
        logger.info(f"Serving Prometheus metrics on {host}:{port}")
        return True

    @property
    def prometheus_enabled(self) -> bool:
        return self._enable_prometheus

    @property
    def server_running(self) -> bool:
        return self._server_running


# =============================================================================
# Process-wide collector
# =============================================================================

_global_collector: UnifiedMetricsCollector | None = None
_collector_lock = threading.Lock()


def get_metrics_collector(enable_prometheus: bool = True) -> UnifiedMetricsCollector:
    """
    Return the process-wide collector, creating it on first call.

    Args:
        enable_prometheus: Only honored by the call that creates it
    """
    global _global_collector
    if _global_collector is None:
        with _collector_lock:
            if _global_collector is None:
                _global_collector = UnifiedMetricsCollector(
                    enable_prometheus=enable_prometheus
                )
    return _global_collector


def reset_metrics_collector() -> None:
    """
    Drop the process-wide collector (mainly for tests).

    Metrics already registered in the default Prometheus registry remain
    there; a new collector reusing their names logs a warning and keeps
    dict-based values only.
    """
    global _global_collector
    with _collector_lock:
        if _global_collector is not None:
            _global_collector.reset()
        _global_collector = None


def resolve_collector(
    metrics_enabled: bool,
    metrics_collector: UnifiedMetricsCollector | None,
) -> UnifiedMetricsCollector | None:
    """Pick the collector a component reports to.

    An explicit collector always wins. Otherwise the process-wide one is
    used when ``metrics_enabled`` is set, and metrics are off when it is not.
    """
    if metrics_collector is not None:
        return metrics_collector
    if metrics_enabled:
        return get_metrics_collector()
    return None


__all__ = [
    "METRIC_DEFINITIONS",
    "MetricDefinition",
    "UnifiedMetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
    "resolve_collector",
]
