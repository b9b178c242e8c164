"""
Retry Module.

Runs one logical request, an HTTP exchange plus its response validation, up to
a bounded number of attempts. Only transient failures (refused connections,
timeouts and corrupt results) are retried; the executor sleeps ``2 ** attempt``
seconds between attempts and re-raises the last error unchanged once the
budget is spent.
"""

import time
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 3

T = TypeVar('T')


def validate_attempts(attempts: Any) -> int:
    """
    Check an attempt count.

    Raises:
        ValidationError: Unless attempts is a positive integer
    """
    if not isinstance(attempts, int) or isinstance(attempts, bool) or attempts < 1:
        raise ValidationError(f"attempts must be a positive integer, got {attempts!r}",
                              {"attempts": attempts})
    return attempts


def is_transient(error: BaseException) -> bool:
    """True when an error is classified as likely to succeed on retry"""
    return bool(getattr(error, 'transient', False))


@dataclass(frozen=True)
class RetryPolicy:
    """
    Attempt budget and backoff schedule.

    Attributes:
        max_attempts: Default number of attempts per call
    """
    max_attempts: int = DEFAULT_ATTEMPTS

    def __post_init__(self):
        validate_attempts(self.max_attempts)

    @staticmethod
    def backoff(attempt: int) -> float:
        """Seconds to sleep after the given (1-based) failed attempt"""
        return float(2 ** attempt)

    def resolve(self, override: Optional[int] = None) -> int:
        """Return the per-call attempt budget"""
        if override is None:
            return self.max_attempts
        return validate_attempts(override)


class RetryExecutor:
    """
    Executes operations under a RetryPolicy.

    Args:
        policy: Attempt budget and backoff schedule
        sleep: Blocking sleep function
    """

    def __init__(self, policy: Optional[RetryPolicy] = None, sleep: Callable[[float], None] = None):
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    def run(self, operation: Callable[[], T], attempts: Optional[int] = None, description: str = "request") -> T:
        """
        Run an operation until it succeeds, fails terminally or runs out of attempts.

        Args:
            operation: Zero-argument callable performing one exchange
            attempts: Per-call override of the attempt budget
            description: Label used in log messages

        Returns:
            The operation's result

        Raises:
            ValidationError: If attempts is not a positive integer
            Exception: The terminal error, or the last transient error
        """
        tries = self.policy.resolve(attempts)
        sleep = self._sleep or time.sleep

        attempt = 1
        while True:
            try:
                return operation()
            except Exception as e:
                if not is_transient(e):
                    raise
                if attempt >= tries:
                    logger.warning(f"{description} failed after {attempt} attempt(s): {e}")
                    raise
                delay = self.policy.backoff(attempt)
                logger.warning(
                    f"Transient failure during {description} (attempt {attempt}/{tries}): {e}. "
                    f"Retrying after {delay:.0f}s"
                )
                sleep(delay)
                attempt += 1
