"""
Tests for the cooperative scheduler.
"""

import pytest

from recipe_slice.core.scheduler import Scheduler


@pytest.fixture
def scheduler():
    return Scheduler()


class TestOneShot:
    """Test call_later."""

    def test_fires_when_due(self, scheduler):
        """Callback runs once its delay has elapsed."""
        calls = []
        scheduler.call_later(1.0, lambda: calls.append(scheduler.now))

        scheduler.advance(0.5)
        assert calls == []

        scheduler.advance(0.5)
        assert calls == [1.0]

        scheduler.advance(5.0)
        assert calls == [1.0]

    def test_cancel(self, scheduler):
        """Cancelled timers never fire; cancel twice is harmless."""
        calls = []
        handle = scheduler.call_later(1.0, lambda: calls.append(1))
        handle.cancel()
        handle.cancel()

        scheduler.advance(2.0)
        assert calls == []
        assert handle.cancelled
        assert scheduler.pending == 0

    def test_due_order(self, scheduler):
        """Timers fire in due-time order, ties in scheduling order."""
        calls = []
        scheduler.call_later(2.0, lambda: calls.append("b"))
        scheduler.call_later(1.0, lambda: calls.append("a"))
        scheduler.call_later(2.0, lambda: calls.append("c"))

        scheduler.advance(3.0)
        assert calls == ["a", "b", "c"]

    def test_rescheduled_within_advance(self, scheduler):
        """A callback may schedule another that fires in the same advance."""
        calls = []

        def first():
            calls.append("first")
            scheduler.call_later(0.5, lambda: calls.append("second"))

        scheduler.call_later(1.0, first)
        scheduler.advance(2.0)
        assert calls == ["first", "second"]
        assert scheduler.now == 2.0


class TestInterval:
    """Test call_every."""

    def test_repeats(self, scheduler):
        """Interval callbacks fire once per elapsed interval."""
        calls = []
        scheduler.call_every(1.0, lambda: calls.append(scheduler.now))

        scheduler.advance(3.5)
        assert calls == [1.0, 2.0, 3.0]

    def test_cancel_from_callback(self, scheduler):
        """An interval timer can cancel itself."""
        calls = []
        holder = {}

        def tick():
            calls.append(1)
            if len(calls) == 2:
                holder["handle"].cancel()

        holder["handle"] = scheduler.call_every(1.0, tick)
        scheduler.advance(10.0)
        assert len(calls) == 2

    def test_invalid_interval(self, scheduler):
        """Non-positive intervals are rejected."""
        with pytest.raises(ValueError):
            scheduler.call_every(0.0, lambda: None)

    def test_cancel_all(self, scheduler):
        """cancel_all discards every pending timer."""
        calls = []
        scheduler.call_every(1.0, lambda: calls.append(1))
        scheduler.call_later(1.0, lambda: calls.append(2))
        scheduler.cancel_all()

        scheduler.advance(5.0)
        assert calls == []
