"""Deadline-bounded retry loop."""

from __future__ import annotations

import time
from typing import Callable, TypeVar

from embedded_postgres.domain.value_objects import Deadline

T = TypeVar("T")


class PollTimeoutError(Exception):
    """Raised when the deadline passes before an attempt succeeds.

    Attributes:
        attempts: Number of attempts made.
        last_error: Error raised by the final attempt.
    """

    def __init__(self, attempts: int, last_error: BaseException | None) -> None:
        super().__init__(f"gave up after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


def poll_until(
    deadline: Deadline,
    attempt: Callable[[], T],
    *,
    retry_on: tuple[type[BaseException], ...],
    interval: float = 0.1,
    on_retry: Callable[[BaseException], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``attempt`` until it returns or the deadline passes.

    At least one attempt is always made. Errors outside ``retry_on``
    propagate immediately.

    Args:
        deadline: When to give up.
        attempt: Zero-argument callable to retry.
        retry_on: Exception types that mean "not yet".
        interval: Pause between attempts in seconds.
        on_retry: Called with each retryable error.
        sleep: Sleep function (injectable for tests).

    Returns:
        The first successful result.

    Raises:
        PollTimeoutError: If no attempt succeeded before the deadline.
    """
    attempts = 0
    while True:
        attempts += 1
        try:
            return attempt()
        except retry_on as e:
            last_error = e
            if on_retry is not None:
                on_retry(e)

        if deadline.expired():
            raise PollTimeoutError(attempts, last_error)
        sleep(min(interval, deadline.remaining()))
