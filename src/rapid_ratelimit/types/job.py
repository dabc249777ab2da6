# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Job types for the token bucket scheduler.

This module defines the unit of work that waits in a scheduler queue.
"""

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from asyncio import Future


@dataclass
class ScheduledJob:
    """
    A job waiting in a scheduler queue.

    Wraps the caller's zero-argument async operation together with the
    future that will be resolved with its outcome. The job is created on
    submission, dispatched once a concurrency slot, a reservoir token and
    the minimum spacing are all available, and discarded once its
    operation settles.

    Attributes:
        operation: Async callable that performs the actual work
        future: Future resolved with the operation's result or exception
        submitted_at: Monotonic timestamp of submission
    """

    operation: Callable[[], Awaitable[Any]]
    future: "Future[Any]"
    submitted_at: float = field(default_factory=time.monotonic)

    @property
    def abandoned(self) -> bool:
        """True once the caller has stopped waiting for this job."""
        return self.future.done()


__all__ = ["ScheduledJob"]
