# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Core types for rapid-ratelimit.

This module exports the data structures shared between the scheduler and
the batch coordinator.
"""

from .batch import BatchResult, ProcessingFailure
from .job import ScheduledJob

__all__ = [
    "BatchResult",
    "ProcessingFailure",
    "ScheduledJob",
]
