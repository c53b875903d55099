import pytest

try:
    from triggersim.scheduler import EventQueue
    from triggersim.event import Event, EXTERNAL_SOURCE
except ImportError:
    import sys
    from pathlib import Path
    pkg_root = Path(__file__).resolve().parents[1]
    if str(pkg_root) not in sys.path:
        sys.path.insert(0, str(pkg_root))
    from triggersim.scheduler import EventQueue
    from triggersim.event import Event, EXTERNAL_SOURCE


class TestQueueBasics:
    """Test basic queue construction and emptiness."""

    def test_new_queue_is_empty(self):
        """A new queue should be empty."""
        q = EventQueue()
        assert q.is_empty()
        assert len(q) == 0

    def test_pop_empty_returns_none(self):
        """pop_min on an empty queue should return None."""
        q = EventQueue()
        assert q.pop_min() is None

    def test_push_makes_non_empty(self):
        """push should add the event."""
        q = EventQueue()
        q.push(Event(1, "A"))
        assert not q.is_empty()
        assert len(q) == 1

    def test_event_defaults_to_external_source(self):
        """Events without a source should be labelled external."""
        assert Event(0, "A").source_id == EXTERNAL_SOURCE

    def test_push_returns_increasing_index(self):
        """push should return the insertion index."""
        q = EventQueue()
        assert q.push(Event(3, "A")) == 0
        assert q.push(Event(1, "B")) == 1
        assert q.push(Event(2, "C")) == 2


class TestPushValidation:
    """Test rejection of bad input."""

    def test_push_rejects_non_event(self):
        """push should reject non-Event objects."""
        q = EventQueue()
        with pytest.raises(TypeError):
            q.push({"time": 1, "channel": "A"})

    def test_push_rejects_negative_time(self):
        """push should reject negative times."""
        q = EventQueue()
        with pytest.raises(ValueError):
            q.push(Event(-1, "A"))

    @pytest.mark.parametrize("time", [float("nan"), float("inf"), float("-inf")])
    def test_push_rejects_non_finite_time(self, time):
        """push should reject NaN and infinite times and leave the queue empty."""
        q = EventQueue()
        with pytest.raises(ValueError):
            q.push(Event(time, "A"))
        assert q.is_empty()

    def test_push_rejects_non_numeric_time(self):
        """push should reject non-numeric times."""
        q = EventQueue()
        with pytest.raises(TypeError):
            q.push(Event("soon", "A"))


class TestOrdering:
    """Test that events come out in time order with FIFO ties."""

    def test_pop_order_with_ties(self):
        """Times [5, 2, 2, 8] pop as 2 (first), 2 (second), 5, 8."""
        q = EventQueue()
        q.push(Event(5, "five"))
        q.push(Event(2, "two-first"))
        q.push(Event(2, "two-second"))
        q.push(Event(8, "eight"))

        popped = [q.pop_min().channel for _ in range(4)]
        assert popped == ["two-first", "two-second", "five", "eight"]
        assert q.is_empty()

    def test_same_time_uses_insertion_order(self):
        """Events with equal times should keep insertion order."""
        q = EventQueue()
        for name in "abcde":
            q.push(Event(1, name))
        assert [q.pop_min().channel for _ in range(5)] == list("abcde")

    def test_interleaved_push_and_pop(self):
        """Events pushed after a pop still sort against what remains."""
        q = EventQueue()
        q.push(Event(1, "A"))
        q.push(Event(4, "D"))
        assert q.pop_min().channel == "A"
        q.push(Event(3, "C"))
        q.push(Event(4, "D2"))
        assert [q.pop_min().channel for _ in range(3)] == ["C", "D", "D2"]


class TestPeekAndClear:
    """Test look-ahead and clearing."""

    def test_peek_does_not_remove(self):
        """peek_events should leave the queue unchanged."""
        q = EventQueue()
        q.push(Event(2, "B"))
        q.push(Event(1, "A"))
        peeked = q.peek_events()
        assert [e.channel for e in peeked] == ["A", "B"]
        assert len(q) == 2

    def test_peek_filters(self):
        """peek_events should filter by channel and source."""
        q = EventQueue()
        q.push(Event(1, "A", "T1"))
        q.push(Event(2, "B", "T1"))
        q.push(Event(3, "A", "T2"))
        assert [e.time for e in q.peek_events(channel="A")] == [1, 3]
        assert [e.time for e in q.peek_events(source_id="T1")] == [1, 2]
        assert [e.time for e in q.peek_events(channel="A", source_id="T2")] == [3]

    def test_peek_limit(self):
        """peek_events should stop at limit."""
        q = EventQueue()
        for t in range(5):
            q.push(Event(t, "A"))
        assert len(q.peek_events(limit=2)) == 2

    def test_clear_discards_everything(self):
        """clear should empty the queue."""
        q = EventQueue()
        q.push(Event(1, "A"))
        q.push(Event(2, "B"))
        q.clear()
        assert q.is_empty()
        assert q.pop_min() is None
