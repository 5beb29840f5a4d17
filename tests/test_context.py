"""Tests for cancellation contexts."""

from __future__ import annotations

import threading
import time

import httpx
import pytest

from onecrm.context import Context
from onecrm.exceptions import RequestCancelled, TransportError


class TestCancellation:
    def test_background_is_never_done(self) -> None:
        ctx = Context.background()
        assert not ctx.done
        assert ctx.deadline is None
        assert ctx.remaining() is None
        ctx.check()

    def test_cancel(self) -> None:
        ctx = Context()
        ctx.cancel()
        assert ctx.cancelled
        assert ctx.done
        with pytest.raises(RequestCancelled, match="cancelled"):
            ctx.check()

    def test_cancel_propagates_to_children(self) -> None:
        parent = Context()
        child = parent.child()
        grandchild = child.with_timeout(60)
        parent.cancel()
        assert child.cancelled
        assert grandchild.cancelled

    def test_child_cancel_does_not_affect_parent(self) -> None:
        parent = Context()
        parent.child().cancel()
        assert not parent.cancelled

    def test_cancel_from_other_thread(self) -> None:
        ctx = Context()
        worker = threading.Thread(target=ctx.cancel)
        worker.start()
        worker.join()
        assert ctx.cancelled

    def test_is_transport_error(self) -> None:
        ctx = Context()
        ctx.cancel()
        with pytest.raises(TransportError):
            ctx.check()


class TestDeadline:
    def test_zero_timeout_is_expired(self) -> None:
        ctx = Context(timeout=0)
        assert ctx.expired
        assert ctx.remaining() == 0.0
        with pytest.raises(RequestCancelled, match="deadline"):
            ctx.check()

    def test_remaining_decreases(self) -> None:
        ctx = Context.background().with_timeout(10)
        first = ctx.remaining()
        time.sleep(0.01)
        assert ctx.remaining() < first <= 10

    def test_child_inherits_earlier_deadline(self) -> None:
        parent = Context(timeout=1)
        child = parent.with_timeout(60)
        assert child.deadline == parent.deadline

    def test_child_deadline_can_be_earlier(self) -> None:
        parent = Context(timeout=60)
        child = parent.with_timeout(1)
        assert child.deadline < parent.deadline


class TestTransportTimeout:
    def test_default_without_deadline(self) -> None:
        assert Context().timeout(30.0) == httpx.Timeout(30.0)

    def test_no_limit(self) -> None:
        assert Context().timeout(None) == httpx.Timeout(None)

    def test_clamped_to_deadline(self) -> None:
        timeout = Context(timeout=2).timeout(30.0)
        assert 0 < timeout.read <= 2

    def test_deadline_without_default(self) -> None:
        timeout = Context(timeout=2).timeout(None)
        assert timeout.connect is not None
        assert timeout.connect <= 2

    def test_default_shorter_than_deadline(self) -> None:
        assert Context(timeout=60).timeout(5.0) == httpx.Timeout(5.0)
