# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Retry orchestration for fallible async operations.

This package provides:
- RetryConfig: Attempt count, fixed delay and classification mode
- DefaultErrorClassifier: Retry schema, missing-object and timeout failures
- RetryOrchestrator: Re-invoke an operation until it succeeds or gives up
- retry_operation: Module-level convenience using a shared orchestrator
- run_with_timeout: Bound each attempt with a time limit
"""

from .classifier import DefaultErrorClassifier
from .config import RetryConfig
from .orchestrator import RetryOrchestrator, get_default_orchestrator, retry_operation
from .timeout import run_with_timeout

__all__ = [
    "DefaultErrorClassifier",
    "RetryConfig",
    "RetryOrchestrator",
    "get_default_orchestrator",
    "retry_operation",
    "run_with_timeout",
]
