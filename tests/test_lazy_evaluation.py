import pytest

import lazy
from models import EXHAUSTED
from utils import counted


class TestLazyEvaluation:
    """Test that nothing runs ahead of demand"""

    def test_construction_is_free(self, tracker):
        """Test that building a chain over a huge range invokes nothing"""
        f = tracker(lambda x: x * 2)
        p = tracker(lambda x: True)
        lazy.range(0, 1_000_000).map(f).filter(p).take_while(p).take(10)
        assert f.count == 0, "map function ran during construction"
        assert p.count == 0, "predicate ran during construction"

    def test_map_runs_only_for_consumed_elements(self, tracker):
        """Test that map is called exactly once per produced element"""
        f = tracker(lambda x: x * 2)
        seq = lazy.range(0, 1_000_000).map(f)
        assert seq.next() == 0
        assert seq.next() == 2
        assert f.calls == [0, 1]

    def test_take_stops_map_exactly(self, tracker, collect):
        """Test that take after map never computes an extra element"""
        f = tracker(lambda x: x * 2)
        result = collect(lazy.range(0, 10).map(f).take(3))
        assert result == [0, 2, 4]
        assert f.calls == [0, 1, 2], f"Expected exactly 3 calls, got {f.calls}"

    def test_generator_called_on_demand(self, tracker, collect):
        """Test that the generator function runs once per pulled value"""
        g = tracker(lambda _: 1)
        seq = lazy.from_generator(lambda: g(None)).take(3)
        assert g.count == 0
        assert collect(seq) == [1, 1, 1]
        assert g.count == 3

    def test_side_effects_follow_order(self, collect):
        """Test that stages interleave per element rather than per stage"""
        events = []

        def mark(stage):
            def _fn(x):
                events.append((stage, x))
                return x
            return _fn

        collect(lazy.range(0, 2).map(mark("a")).map(mark("b")))
        assert events == [("a", 0), ("b", 0), ("a", 1), ("b", 1)]

    def test_no_look_ahead(self):
        """Test that a single next() pulls the source exactly once"""
        seq, counter = counted(lazy.range(0, 100))
        seq = seq.map(lambda x: x)
        seq.next()
        assert counter.pulls == 1

    def test_partial_consumption_can_be_dropped(self, tracker):
        """Test that an abandoned chain does no further work"""
        f = tracker()
        seq = lazy.from_generator(lambda: 42).map(f)
        seq.next()
        del seq
        assert f.count == 1


class TestEach:
    """Test the terminal each() operation"""

    def test_each_returns_none(self):
        assert lazy.range(0, 3).each(lambda x: x) is None

    def test_each_consumes_sequence(self):
        seq = lazy.range(0, 3)
        seq.each(lambda x: None)
        assert seq.consumed
        with pytest.raises(RuntimeError):
            seq.each(lambda x: None)

    def test_each_after_partial_next(self, collect):
        """Test that each() continues from the current position"""
        seq = lazy.range(0, 5)
        seq.next()
        seq.next()
        assert collect(seq) == [2, 3, 4]

    def test_each_on_exhausted_sequence(self, tracker):
        f = tracker()
        seq = lazy.range(0, 1)
        seq.next()
        assert seq.next() is EXHAUSTED
        seq.each(f)
        assert f.count == 0
