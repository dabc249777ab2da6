"""
Shared fixtures for benchmark tests.
"""

import pytest

from rapid_ratelimit.scheduler import SchedulerConfig, TokenBucketScheduler


@pytest.fixture
def benchmark_config():
    """Configuration whose limits never throttle the benchmarks."""
    return SchedulerConfig(
        max_concurrent=1000,
        interval_cap=1_000_000,
        interval=60.0,
        min_time=0.00001,
    )


@pytest.fixture
def scheduler_factory(benchmark_config):
    """Build schedulers sharing the benchmark config unless overridden."""

    def factory(**overrides):
        if overrides:
            values = {
                "max_concurrent": benchmark_config.max_concurrent,
                "interval_cap": benchmark_config.interval_cap,
                "interval": benchmark_config.interval,
                "min_time": benchmark_config.min_time,
            }
            values.update(overrides)
            return TokenBucketScheduler(SchedulerConfig(**values), name="benchmark")
        return TokenBucketScheduler(benchmark_config, name="benchmark")

    return factory


@pytest.fixture
def instant_request():
    """Operation that returns without doing any work."""

    async def request():
        return {"result": "instant"}

    return request
