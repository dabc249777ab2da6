# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Concurrent scheduling with a token bucket.

This module provides:
- SchedulerConfig: Concurrency, reservoir and spacing configuration
- TokenBucketScheduler: FIFO scheduler bounding concurrency and throughput
"""

from .config import SchedulerConfig
from .token_bucket import TokenBucketScheduler

__all__ = [
    "SchedulerConfig",
    "TokenBucketScheduler",
]
