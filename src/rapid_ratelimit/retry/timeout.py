# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Per-attempt time limits for retried operations."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ..exceptions import ConfigurationError

T = TypeVar("T")


def run_with_timeout(
    operation: Callable[[], Awaitable[T]], timeout: float
) -> Callable[[], Awaitable[T]]:
    """
    Bound each invocation of ``operation`` to ``timeout`` seconds.

    The returned operation raises ``asyncio.TimeoutError`` on expiry, which
    the default classifier treats as retryable, so it composes directly
    with ``RetryOrchestrator.retry``:

        >>> await orchestrator.retry(run_with_timeout(lambda: call_model(prompt), 30.0))
    """
    if timeout <= 0:
        raise ConfigurationError("timeout must be greater than 0")

    async def _bounded() -> T:
        return await asyncio.wait_for(operation(), timeout=timeout)

    return _bounded


__all__ = ["run_with_timeout"]
