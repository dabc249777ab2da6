"""
Shared fixtures for integration tests.

Each test gets a collector bound to its own Prometheus registry so metric
assertions never leak between tests, and the global collector singleton is
reset around every test.

Example:
    @pytest.mark.asyncio
    async def test_flow(collector):
        scheduler = TokenBucketScheduler(config, metrics_collector=collector)
        ...
        assert collector.get_counter(JOBS_COMPLETED_TOTAL, {"scheduler": "default"}) == 3
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
from prometheus_client import CollectorRegistry

from rapid_ratelimit.observability import UnifiedMetricsCollector, reset_metrics_collector

logger = logging.getLogger(__name__)


@pytest.fixture(autouse=True)
def _isolated_global_collector() -> Iterator[None]:
    reset_metrics_collector()
    yield
    reset_metrics_collector()


@pytest.fixture
def collector() -> UnifiedMetricsCollector:
    """Collector mirroring into a private registry."""
    return UnifiedMetricsCollector(registry=CollectorRegistry())
