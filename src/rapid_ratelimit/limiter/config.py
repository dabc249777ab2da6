# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Configuration for the sliding window limiter.
"""

from dataclasses import dataclass

from ..exceptions import ConfigurationError


@dataclass
class RateWindowConfig:
    """
    Configuration for a serialized, sliding window rate limiter.

    All durations are in seconds.
    """

    min_request_interval: float = 1.0
    """Minimum gap between two consecutive admissions."""

    rate_limit_window: float = 60.0
    """Length of the trailing window over which admissions are counted."""

    max_requests_per_window: int = 20
    """Maximum admissions allowed inside one window."""

    reset_buffer: float = 1.0
    """Extra time to wait on top of the window when it is exhausted."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.min_request_interval < 0:
            raise ConfigurationError("min_request_interval must be non-negative")
        if self.rate_limit_window <= 0:
            raise ConfigurationError("rate_limit_window must be greater than 0")
        if self.max_requests_per_window < 1:
            raise ConfigurationError("max_requests_per_window must be at least 1")
        if self.reset_buffer < 0:
            raise ConfigurationError("reset_buffer must be non-negative")


__all__ = ["RateWindowConfig"]
