"""Concurrency limiter for outbound generation calls.

RateLimiter caps the number of generation calls in flight across all
providers. Waiters are admitted in arrival order and give up promptly when
their GenerationContext is cancelled or expires.
"""

import threading
from collections import deque
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

import structlog

from commitmsg.context import GenerationContext
from commitmsg.exceptions import RateLimitAbort

logger = structlog.get_logger(__name__)

# Upper bound on how long a waiter sleeps before re-checking cancellation
_POLL_INTERVAL = 0.05


class RateLimiter:
    """FIFO semaphore with cancellation support."""

    def __init__(self, max_concurrent: int):
        """Initialize the limiter.

        Args:
            max_concurrent: Maximum number of slots held at once.
        """
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {max_concurrent}")
        self.max_concurrent = max_concurrent
        self._cond = threading.Condition()
        self._waiters: deque[object] = deque()
        self._active = 0
        self._peak = 0

    @property
    def active(self) -> int:
        """Number of slots currently held."""
        with self._cond:
            return self._active

    @property
    def peak(self) -> int:
        """Highest number of slots held at once since creation."""
        with self._cond:
            return self._peak

    def acquire(self, ctx: Optional[GenerationContext] = None) -> Callable[[], None]:
        """Wait for a free slot.

        Args:
            ctx: Cancellation signal. None waits indefinitely.

        Returns:
            A release callable. Call it exactly once when the work is done;
            further calls are ignored.

        Raises:
            RateLimitAbort: If ctx is cancelled or expires before a slot frees up.
        """
        ticket = object()
        with self._cond:
            self._waiters.append(ticket)
            try:
                while self._waiters[0] is not ticket or self._active >= self.max_concurrent:
                    if ctx is not None and ctx.cancelled:
                        raise RateLimitAbort("Cancelled while waiting for a rate limiter slot")
                    timeout = _POLL_INTERVAL
                    if ctx is not None and ctx.remaining() is not None:
                        timeout = min(timeout, ctx.remaining())
                    self._cond.wait(timeout)
            finally:
                self._waiters.remove(ticket)
                # The next waiter in line may be able to proceed now
                self._cond.notify_all()

            self._active += 1
            self._peak = max(self._peak, self._active)
            logger.debug("rate_limit_acquired", active=self._active, waiting=len(self._waiters))

        released = False
        guard = threading.Lock()

        def release() -> None:
            nonlocal released
            with guard:
                if released:
                    return
                released = True
            with self._cond:
                self._active -= 1
                self._cond.notify_all()

        return release

    @contextmanager
    def slot(self, ctx: Optional[GenerationContext] = None) -> Iterator[None]:
        """Hold a slot for the duration of a with-block."""
        release = self.acquire(ctx)
        try:
            yield
        finally:
            release()
