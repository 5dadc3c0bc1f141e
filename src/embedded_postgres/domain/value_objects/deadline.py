"""Monotonic deadline shared by the steps of one start sequence."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable


@dataclass(frozen=True)
class Deadline:
    """A point in monotonic time after which an operation must give up.

    Example:
        >>> deadline = Deadline.after(15.0)
        >>> deadline.expired()
        False
    """

    expires_at: float
    clock: Callable[[], float] = field(default=time.monotonic, compare=False, repr=False)

    @classmethod
    def after(cls, seconds: float, clock: Callable[[], float] = time.monotonic) -> Deadline:
        """Create a deadline ``seconds`` from now."""
        if seconds < 0:
            raise ValueError(f"seconds must be non-negative, got {seconds}")
        return cls(expires_at=clock() + seconds, clock=clock)

    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(0.0, self.expires_at - self.clock())

    def expired(self) -> bool:
        return self.clock() >= self.expires_at
