# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Protocol definitions for pluggable rate limiter components.

Available protocols:
- ErrorClassifierProtocol: Interface for deciding which failures are retryable
"""

from .classifier import ErrorClassifierProtocol

__all__ = [
    "ErrorClassifierProtocol",
]
