"""
Operation context carrying a deadline and a cancellation flag
"""

import threading
import time
from typing import Optional
from .exceptions import TimeoutError, CancelledError


class OperationContext:
    """Deadline and cancellation shared by a chain of driver calls.

    A context with no deadline waits forever. Child contexts created with
    :meth:`with_timeout` share the parent's cancellation flag and never
    outlive the parent's deadline.
    """

    def __init__(self, deadline: Optional[float] = None,
                 cancel_event: Optional[threading.Event] = None):
        self.deadline = deadline
        self._cancel_event = cancel_event or threading.Event()

    @classmethod
    def background(cls) -> "OperationContext":
        """Context with no deadline"""
        return cls()

    @classmethod
    def with_deadline_in(cls, seconds: float) -> "OperationContext":
        """Context expiring ``seconds`` from now"""
        return cls(deadline=time.monotonic() + seconds)

    def with_timeout(self, seconds: float) -> "OperationContext":
        """Child context bounded by ``seconds`` and by this context's deadline"""
        deadline = time.monotonic() + seconds
        if self.deadline is not None:
            deadline = min(deadline, self.deadline)
        return OperationContext(deadline=deadline, cancel_event=self._cancel_event)

    def cancel(self) -> None:
        """Cancel this context and every context derived from it"""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, None if unbounded"""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def check(self, operation: str = "operation") -> None:
        """Raise if the context is cancelled or past its deadline"""
        if self.cancelled:
            raise CancelledError(f"{operation} cancelled")
        if self.expired():
            raise TimeoutError(f"{operation} exceeded its deadline")

    def sleep(self, seconds: float) -> None:
        """Sleep up to ``seconds``, waking early on cancellation or deadline"""
        remaining = self.remaining()
        if remaining is not None:
            seconds = min(seconds, remaining)
        if seconds > 0:
            self._cancel_event.wait(seconds)


def ensure_context(ctx: Optional[OperationContext]) -> OperationContext:
    """Return ``ctx`` or a fresh background context"""
    return ctx if ctx is not None else OperationContext.background()
