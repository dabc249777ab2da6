# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Retry configuration.
"""

from dataclasses import dataclass

from ..exceptions import ConfigurationError


@dataclass
class RetryConfig:
    """
    Configuration for the retry orchestrator.

    The delay between attempts is fixed; it does not grow with the attempt
    number.
    """

    retry_only_classified_errors: bool = True
    """Only retry failures the classifier marks as retryable."""

    max_retries: int = 3
    """Total number of attempts, including the first one."""

    delay: float = 1.0
    """Seconds to wait between attempts."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.max_retries < 1:
            raise ConfigurationError("max_retries must be at least 1")
        if self.delay < 0:
            raise ConfigurationError("delay must be non-negative")


__all__ = ["RetryConfig"]
