# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Default error classification for retries.

Structured-output model calls fail in a few characteristic, usually
transient, ways: the response does not validate against the schema, no
structured object is produced at all, or the call times out. Those are
retryable; everything else is treated as fatal.
"""

import logging
from typing import ClassVar

from pydantic import ValidationError

from ..exceptions import NoObjectGeneratedError

logger = logging.getLogger(__name__)


def _class_names(error: BaseException) -> list[str]:
    return [cls.__name__ for cls in type(error).__mro__]


class DefaultErrorClassifier:
    """
    Classify schema, missing-object and timeout failures as retryable.

    An error is retryable when any of the following hold:

    * it is a schema/structural validation failure (a pydantic
      ``ValidationError``, or any exception class named in
      ``VALIDATION_ERROR_NAMES``),
    * it is a "no structured object produced" failure
      (``NoObjectGeneratedError`` or a class of that name from a provider
      SDK),
    * any class in its hierarchy has a name containing ``TimeoutError``.

    Class names are compared so that errors from SDKs this package does
    not import are recognized too.
    """

    VALIDATION_ERROR_NAMES: ClassVar[frozenset[str]] = frozenset(
        {"ValidationError", "ZodError"}
    )
    NO_OBJECT_ERROR_NAMES: ClassVar[frozenset[str]] = frozenset(
        {"NoObjectGeneratedError"}
    )
    TIMEOUT_MARKER: ClassVar[str] = "TimeoutError"

    def is_validation_error(self, error: BaseException) -> bool:
        if isinstance(error, ValidationError):
            return True
        return any(name in self.VALIDATION_ERROR_NAMES for name in _class_names(error))

    def is_no_object_error(self, error: BaseException) -> bool:
        if isinstance(error, NoObjectGeneratedError):
            return True
        return any(name in self.NO_OBJECT_ERROR_NAMES for name in _class_names(error))

    def is_timeout_error(self, error: BaseException) -> bool:
        return any(self.TIMEOUT_MARKER in name for name in _class_names(error))

    def is_retryable(self, error: BaseException) -> bool:
        is_validation = self.is_validation_error(error)
        is_no_object = self.is_no_object_error(error)
        is_timeout = self.is_timeout_error(error)

        logger.debug(
            f"Error classification for {type(error).__name__}: "
            f"validation={is_validation}, no_object={is_no_object}, "
            f"timeout={is_timeout}, message={error}"
        )

        return is_validation or is_no_object or is_timeout


__all__ = ["DefaultErrorClassifier"]
