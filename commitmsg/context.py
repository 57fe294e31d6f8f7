"""Cancellation and deadline signal for generation requests.

A GenerationContext is created by the caller and passed through the
orchestrator to the rate limiter and provider. Cancelling it aborts a
pending rate limiter wait and an in-flight provider call. Providers also
use the remaining time as their request timeout, with SDK retries off.
"""

from __future__ import annotations

import threading
import time
from typing import Optional

from commitmsg.exceptions import GenerationCancelled


class GenerationContext:
    """Cancellation flag plus optional deadline."""

    def __init__(self, deadline: Optional[float] = None):
        """Initialize the context.

        Args:
            deadline: Absolute time.monotonic() value after which the
                context counts as cancelled. None means no deadline.
        """
        self.deadline = deadline
        self._cancelled = threading.Event()

    @classmethod
    def with_timeout(cls, seconds: Optional[float]) -> "GenerationContext":
        """Create a context that expires after the given number of seconds."""
        if seconds is None:
            return cls()
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        """Cancel the context. Safe to call from any thread."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        """True once cancelled or past the deadline."""
        if self._cancelled.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline, or None without a deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def raise_if_cancelled(self) -> None:
        """Raise GenerationCancelled if the context is done."""
        if self._cancelled.is_set():
            raise GenerationCancelled("Generation was cancelled")
        if self.cancelled:
            raise GenerationCancelled("Generation deadline exceeded")
