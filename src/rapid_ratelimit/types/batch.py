# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Result types for batch processing.

A batch never aborts because one item failed. Instead every input item
ends up either as a value in ``BatchResult.successful`` or as a
``ProcessingFailure`` in ``BatchResult.failed``.
"""

from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class ProcessingFailure(Generic[T]):
    """
    An input item paired with the error its processing produced.

    Attributes:
        item: The original input item
        error: The exception raised while processing it
    """

    item: T
    error: Exception


@dataclass
class BatchResult(Generic[R, T]):
    """
    Outcome of processing a collection of items.

    Both lists are in completion order, which is not necessarily the order
    the items were submitted in.

    Attributes:
        successful: Values returned by the processor
        failed: One ProcessingFailure per item whose processing raised
    """

    successful: list[R] = field(default_factory=list)
    failed: list[ProcessingFailure[T]] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Number of items accounted for (successes plus failures)."""
        return len(self.successful) + len(self.failed)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)

    @property
    def failed_items(self) -> list[T]:
        """The input items that failed, in completion order."""
        return [failure.item for failure in self.failed]


__all__ = ["BatchResult", "ProcessingFailure"]
