# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Batch processing of many items through a shared scheduler."""

from .coordinator import BatchCoordinator

__all__ = ["BatchCoordinator"]
