"""Cancellation contexts for outgoing requests.

A :class:`Context` carries two independent stop signals: an explicit
:meth:`~Context.cancel` call (thread-safe, usable from any thread) and an
optional deadline. Contexts form a tree; a child is done as soon as its
parent is done, so cancelling a flow-level context stops every request
derived from it.

The HTTP client consults the context at several checkpoints:

- before building and before sending the request,
- through the transport timeout, which is clamped to the remaining
  deadline so an in-flight call aborts when the deadline passes,
- as soon as response headers arrive,
- between body chunks while a :class:`~onecrm.client.response.Response`
  is being read.

Example::

    ctx = Context.background().with_timeout(5.0)
    response = client.get("me", RequestOptions().context(ctx))
"""

from __future__ import annotations

import threading
import time
from typing import Optional

import httpx

from onecrm.exceptions import RequestCancelled


class Context:
    """A cancellable, optionally time-limited request context.

    Args:
        timeout: Seconds from now until the deadline. ``None`` means no
            deadline of its own (the parent's deadline still applies).
        parent: Optional parent context.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        parent: Optional[Context] = None,
    ) -> None:
        self._parent = parent
        self._event = threading.Event()
        self._deadline: Optional[float] = None
        if timeout is not None:
            self._deadline = time.monotonic() + timeout

    @classmethod
    def background(cls) -> Context:
        """Return a fresh context that is never cancelled and has no deadline."""
        return cls()

    def child(self) -> Context:
        """Return a child context that can be cancelled on its own."""
        return Context(parent=self)

    def with_timeout(self, seconds: float) -> Context:
        """Return a child context whose deadline is *seconds* from now."""
        return Context(timeout=seconds, parent=self)

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #

    def cancel(self) -> None:
        """Cancel this context and, transitively, all of its children."""
        self._event.set()

    @property
    def deadline(self) -> Optional[float]:
        """The earliest ``time.monotonic()`` deadline along the parent chain."""
        own = self._deadline
        inherited = self._parent.deadline if self._parent is not None else None
        if own is None:
            return inherited
        if inherited is None:
            return own
        return min(own, inherited)

    @property
    def cancelled(self) -> bool:
        """``True`` once :meth:`cancel` was called here or on an ancestor."""
        if self._event.is_set():
            return True
        return self._parent is not None and self._parent.cancelled

    @property
    def expired(self) -> bool:
        """``True`` once the deadline has passed."""
        deadline = self.deadline
        return deadline is not None and time.monotonic() >= deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline, or ``None`` without a deadline."""
        deadline = self.deadline
        if deadline is None:
            return None
        return max(0.0, deadline - time.monotonic())

    def check(self) -> None:
        """Raise :class:`RequestCancelled` if the context is done."""
        if self.cancelled:
            raise RequestCancelled("Request cancelled")
        if self.expired:
            raise RequestCancelled("Request deadline exceeded")

    def timeout(self, default: Optional[float]) -> httpx.Timeout:
        """Build the transport timeout for one call.

        Args:
            default: The client's per-call timeout in seconds, or ``None``
                for no limit.

        Returns:
            An :class:`httpx.Timeout` no longer than the remaining deadline.
        """
        remaining = self.remaining()
        if remaining is None:
            return httpx.Timeout(default)
        if default is None:
            return httpx.Timeout(remaining)
        return httpx.Timeout(min(default, remaining))

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "expired" if self.expired else "active"
        return f"Context({state}, remaining={self.remaining()})"
