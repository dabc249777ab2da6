# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocol for error classification."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ErrorClassifierProtocol(Protocol):
    """
    Protocol for error classification.

    The retry orchestrator asks a classifier whether a failure is worth
    another attempt. Implement this to plug in provider-specific rules.
    """

    def is_retryable(self, error: BaseException) -> bool:
        """
        Decide whether an operation that raised ``error`` should be retried.

        Args:
            error: The exception raised by the operation

        Returns:
            True if the failure is transient and the operation may be retried
        """
        ...
