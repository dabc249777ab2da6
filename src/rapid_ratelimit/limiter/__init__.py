# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Serialized rate limiting.

This module provides:
- RateWindowConfig: Window, spacing and buffer settings
- SlidingWindowLimiter: Single-lane limiter with a trailing request window
"""

from .config import RateWindowConfig
from .sliding_window import SlidingWindowLimiter

__all__ = [
    "RateWindowConfig",
    "SlidingWindowLimiter",
]
