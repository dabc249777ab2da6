# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Exception classes for the rapid rate limiter library.

This module defines the exception hierarchy used throughout the library.
All exceptions inherit from RateLimiterError, making it easy to catch
all rate limiter-related exceptions with a single except clause.

Errors raised by the operations you schedule are never wrapped in these
classes: limiters and schedulers only decide *when* an operation runs, so
the operation's own exception reaches the caller unchanged.
"""


class RateLimiterError(Exception):
    """Base exception for all rate limiter errors.

    This is the root exception class for the library. Catch this exception
    to handle any error originating from the library itself.

    Example:
        try:
            await scheduler.schedule(call_model)
        except RateLimiterError as e:
            logger.error(f"Rate limiter error: {e}")
    """

    pass


class ConfigurationError(RateLimiterError, ValueError):
    """Raised when configuration is invalid.

    This exception is raised synchronously while building a limiter,
    scheduler or retry configuration. It is fatal: retrying with the same
    values will fail the same way.

    Common causes include:
    - Zero or negative concurrency, interval or spacing values
    - A reservoir size (interval_cap) smaller than max_concurrent
    - A window limiter allowing zero requests per window

    It also subclasses ValueError so callers validating plain values can
    keep catching the builtin.

    Example:
        try:
            scheduler = TokenBucketScheduler(SchedulerConfig(max_concurrent=0))
        except ConfigurationError as e:
            logger.error(f"Invalid configuration: {e}")
            raise SystemExit(1)
    """

    pass


class SchedulerStoppedError(RateLimiterError):
    """Raised for work that a stopped scheduler will never run.

    ``TokenBucketScheduler.stop()`` is a graceful drain: operations already
    dispatched run to completion, but jobs still waiting in the queue are
    abandoned. Callers awaiting those jobs observe this exception, and any
    attempt to submit new work after ``stop()`` raises it immediately.

    Attributes:
        scheduler_name: Name of the scheduler that was stopped, if known.

    Example:
        try:
            result = await scheduler.schedule(call_model)
        except SchedulerStoppedError:
            logger.info("Shutting down, request was not sent")
    """

    def __init__(
        self,
        message: str = "Scheduler has been stopped",
        scheduler_name: str | None = None,
    ):
        super().__init__(message)
        self.scheduler_name = scheduler_name


class OperationError(RateLimiterError):
    """Generic failure for an operation that did not fail with an Exception.

    The batch coordinator records every per-item failure. When an item's
    outcome is a ``BaseException`` that is not an ``Exception`` (for
    example a job cancelled before it could run), it is wrapped in this
    class so that ``ProcessingFailure.error`` is always an ``Exception``.

    Attributes:
        original: The underlying outcome, if any.
    """

    def __init__(
        self,
        message: str = "Unknown error",
        original: BaseException | None = None,
    ):
        super().__init__(message)
        self.original = original


class NoObjectGeneratedError(RateLimiterError):
    """Raised by integrations when a model call produced no structured object.

    Structured-output calls can return text that does not contain the
    requested object at all. Such failures are usually transient, so the
    default error classifier treats this exception as retryable.

    Attributes:
        text: The raw text the model returned, if available.

    Example:
        payload = extract_json(response.text)
        if payload is None:
            raise NoObjectGeneratedError("No JSON object in response", text=response.text)
    """

    def __init__(
        self,
        message: str = "No object generated",
        text: str | None = None,
    ):
        super().__init__(message)
        self.text = text
