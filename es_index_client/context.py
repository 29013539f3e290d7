"""Caller-driven cancellation and deadlines for a single call."""

from __future__ import annotations

import threading
import time
import uuid
from typing import Optional


class CallContext:
    """Cancellation signal threaded through one client call.

    The client never times out on its own: a deadline only exists when the
    caller sets ``timeout``.  ``cancel()`` may be called from any thread.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        request_id: Optional[str] = None,
    ) -> None:
        self.request_id = request_id or uuid.uuid4().hex
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or ``None`` without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def wait(self, seconds: float) -> bool:
        """Sleep up to *seconds*, waking early on cancel or deadline.

        Returns ``True`` if the context is done when the wait ends.
        """
        remaining = self.remaining()
        if remaining is not None:
            seconds = min(seconds, remaining)
        self._cancelled.wait(seconds)
        return self.done


def background() -> CallContext:
    """A context that is never cancelled and has no deadline."""
    return CallContext()
