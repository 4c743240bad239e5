"""Retry policy for remote requests.

Each request attempt is classified into an :class:`AttemptResult` instead of
signalling retries through exceptions. :func:`run_with_retry` drives the
attempts and sleeps between them, so the policy can be tested with a fake
attempt function and a fake sleep.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .exceptions import OutlineNetworkError, OutlineRateLimitError, OutlineSyncError
from .utils import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY

logger = logging.getLogger(__name__)


class AttemptStatus(str, Enum):
    """Outcome of a single request attempt."""

    SUCCESS = "success"
    """Request succeeded, ``data`` holds the parsed body"""

    RETRYABLE = "retryable"
    """Transient failure (rate limit, transport error)"""

    PERMANENT = "permanent"
    """Permanent rejection, never retried"""


@dataclass(frozen=True)
class AttemptResult:
    """Result of a single request attempt."""

    status: AttemptStatus
    data: Any = None
    error: Optional[OutlineSyncError] = None

    @classmethod
    def success(cls, data: Any) -> "AttemptResult":
        return cls(AttemptStatus.SUCCESS, data=data)

    @classmethod
    def retryable(cls, error: OutlineSyncError) -> "AttemptResult":
        return cls(AttemptStatus.RETRYABLE, error=error)

    @classmethod
    def permanent(cls, error: OutlineSyncError) -> "AttemptResult":
        return cls(AttemptStatus.PERMANENT, error=error)


def backoff_delay(attempt: int, base_delay: float = DEFAULT_RETRY_DELAY) -> float:
    """Calculate the delay before the next retry using exponential backoff.

    Args:
        attempt: Current attempt number (0-based)
        base_delay: Delay after the first failed attempt, in seconds

    Returns:
        Delay in seconds: ``base_delay * 2 ** attempt``
    """
    return base_delay * (2**attempt)


def _exhausted(error: OutlineSyncError, retries: int) -> OutlineSyncError:
    """Build the error raised once the retry budget is spent."""
    if isinstance(error, OutlineRateLimitError):
        return OutlineRateLimitError(
            f"Rate limited after {retries} retries", retries=retries
        )
    if isinstance(error, OutlineNetworkError):
        return OutlineNetworkError(
            f"Network error after {retries} retries: {error}", retries=retries
        )
    return error


def run_with_retry(
    attempt_fn: Callable[[], AttemptResult],
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_RETRY_DELAY,
    sleep: Callable[[float], None] = time.sleep,
    description: str = "request",
) -> Any:
    """Run ``attempt_fn`` until it succeeds, fails permanently, or retries run out.

    Args:
        attempt_fn: Performs one attempt and classifies its result
        max_retries: Number of additional attempts after the first one
        base_delay: Base delay for exponential backoff, in seconds
        sleep: Function used to wait between attempts
        description: Name of the operation, used in log messages

    Returns:
        The ``data`` of the first successful attempt

    Raises:
        OutlineSyncError: The permanent error, or the retryable error of the
            last attempt once ``max_retries`` retries have been spent
    """
    for attempt in range(max_retries + 1):
        result = attempt_fn()

        if result.status is AttemptStatus.SUCCESS:
            return result.data

        if result.error is None:
            raise OutlineSyncError(
                f"{description}: {result.status.value} attempt without an error"
            )
        if result.status is AttemptStatus.PERMANENT:
            raise result.error

        if attempt == max_retries:
            logger.warning(
                f"{description}: giving up after {max_retries} retries: "
                f"{result.error}"
            )
            raise _exhausted(result.error, max_retries)

        delay = backoff_delay(attempt, base_delay)
        logger.info(
            f"{description}: {result.error}, retrying in {delay:g}s "
            f"(attempt {attempt + 1}/{max_retries})"
        )
        sleep(delay)

    # max_retries < 0
    raise OutlineSyncError(f"{description}: no attempt was made")
