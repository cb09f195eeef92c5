"""Cancellation and deadline propagation for tool calls."""

from __future__ import annotations

import threading
import time
from uuid import uuid4

CANCELED = "context canceled"
DEADLINE_EXCEEDED = "context deadline exceeded"


class CallContext:
    """Carries a request id, an optional deadline and a cancel flag.

    Derived contexts inherit the parent's cancellation and never outlive
    the parent's deadline.
    """

    def __init__(
        self,
        *,
        request_id: str | None = None,
        deadline: float | None = None,
        parent: CallContext | None = None,
    ) -> None:
        self.parent = parent
        self.request_id = request_id or (parent.request_id if parent else str(uuid4()))
        parent_deadline = parent.deadline if parent else None
        if parent_deadline is not None and (deadline is None or parent_deadline < deadline):
            deadline = parent_deadline
        self.deadline = deadline
        self._canceled = threading.Event()

    @classmethod
    def background(cls, *, request_id: str | None = None) -> CallContext:
        return cls(request_id=request_id)

    def with_timeout(self, timeout_s: float) -> CallContext:
        return CallContext(deadline=time.monotonic() + timeout_s, parent=self)

    def cancel(self) -> None:
        self._canceled.set()

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    def err(self) -> str | None:
        """Return why the context is done, or None while it is still live."""
        if self._canceled.is_set():
            return CANCELED
        if self.parent is not None:
            parent_err = self.parent.err()
            if parent_err == CANCELED:
                return parent_err
        if self.deadline is not None and time.monotonic() >= self.deadline:
            return DEADLINE_EXCEEDED
        return None

    def done(self) -> bool:
        return self.err() is not None
