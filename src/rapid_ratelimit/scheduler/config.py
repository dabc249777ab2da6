# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Scheduler Configuration for rapid-ratelimit

This module provides the configuration class for the token bucket
scheduler: concurrency, reservoir size, refill interval and dispatch
spacing.
"""

import math
from dataclasses import dataclass

from ..exceptions import ConfigurationError


@dataclass
class SchedulerConfig:
    """
    Configuration for the token bucket scheduler.

    All durations are in seconds.
    """

    max_concurrent: int = 5
    """Maximum number of operations executing at the same time."""

    interval_cap: int = 10
    """Reservoir size: operations allowed to start per interval."""

    interval: float = 1.0
    """Refill period of the reservoir."""

    min_time: float | None = None
    """Minimum spacing between two dispatches.

    When unset, ``interval / interval_cap`` rounded up to the next whole
    millisecond is used, which spreads one interval's worth of work evenly.
    """

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.max_concurrent <= 0:
            raise ConfigurationError("max_concurrent must be greater than 0")
        if self.interval_cap < self.max_concurrent:
            raise ConfigurationError(
                "interval_cap must be greater than or equal to max_concurrent"
            )
        if self.interval <= 0:
            raise ConfigurationError("interval must be greater than 0")
        if self.min_time is not None and self.min_time <= 0:
            raise ConfigurationError("min_time, if specified, must be greater than 0")

    @property
    def effective_min_time(self) -> float:
        """Dispatch spacing actually enforced by the scheduler."""
        if self.min_time is not None:
            return self.min_time
        # Round away float noise (0.7 * 1000 == 700.0000000000001) before ceil
        interval_ms = round(self.interval * 1000, 6)
        return math.ceil(interval_ms / self.interval_cap) / 1000


__all__ = ["SchedulerConfig"]
