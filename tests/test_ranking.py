"""
Tests for the count index and the bounded ranking heap
"""
import random

import pytest
from toptalkers.core.count_index import CountIndex
from toptalkers.core.entries import CountEntry
from toptalkers.core.ranking import BoundedRanking


def assert_heap_valid(ranking):
    """Check heap order and the address -> slot side index"""
    heap = ranking._heap
    for pos, entry in enumerate(heap):
        assert ranking._slots[entry.address] == pos
        for child in (2 * pos + 1, 2 * pos + 2):
            if child < len(heap):
                assert entry.rank_key() < heap[child].rank_key()
    assert len(ranking._slots) == len(heap)


class TestCountEntry:
    """Test CountEntry identity"""

    def test_equality_by_address(self):
        """Entries with the same address are equal whatever their counts"""
        assert CountEntry("10.0.0.1", 1) == CountEntry("10.0.0.1", 7)
        assert CountEntry("10.0.0.1") != CountEntry("10.0.0.2")
        assert hash(CountEntry("10.0.0.1", 1)) == hash(CountEntry("10.0.0.1", 7))


class TestCountIndex:
    """Test CountIndex functionality"""

    def test_first_increment_creates_entry(self):
        """New address starts at count 1"""
        index = CountIndex()
        entry = index.increment("10.0.0.1")

        assert entry.address == "10.0.0.1"
        assert entry.count == 1
        assert len(index) == 1

    def test_entry_mutated_in_place(self):
        """Later increments return the same object"""
        index = CountIndex()
        first = index.increment("10.0.0.1")
        second = index.increment("10.0.0.1")

        assert first is second
        assert first.count == 2
        assert index.get("10.0.0.1") is first

    def test_count_and_total(self):
        """Per-address counts and the running total"""
        index = CountIndex()
        for address in ["a", "b", "a", "c", "a"]:
            index.increment(address)

        assert index.count("a") == 3
        assert index.count("b") == 1
        assert index.count("missing") == 0
        assert index.total == 5
        assert len(index) == 3

    def test_stamps_increase(self):
        """Each increment gets a later stamp"""
        index = CountIndex()
        a = index.increment("a")
        stamp_a = a.stamp
        b = index.increment("b")

        assert b.stamp > stamp_a
        index.increment("a")
        assert a.stamp > b.stamp

    def test_empty_string_is_a_key(self):
        """Empty string is tracked like any other address"""
        index = CountIndex()
        index.increment("")
        index.increment("")

        assert index.count("") == 2
        assert "" in index

    def test_clear(self):
        """Clear empties the index"""
        index = CountIndex()
        index.increment("a")
        index.clear()

        assert len(index) == 0
        assert index.total == 0
        assert index.get("a") is None


class TestBoundedRanking:
    """Test BoundedRanking reconcile contract"""

    def test_invalid_capacity(self):
        """Capacity must be positive"""
        with pytest.raises(ValueError):
            BoundedRanking(0)

    def test_insert_below_capacity(self):
        """Entries are added while there is room"""
        index = CountIndex()
        ranking = BoundedRanking(3)
        for address in ["a", "b"]:
            ranking.reconcile(index.increment(address))

        assert len(ranking) == 2
        assert "a" in ranking
        assert "b" in ranking

    def test_member_moves_up(self):
        """Incrementing a member reorders it"""
        index = CountIndex()
        ranking = BoundedRanking(3)
        for address in ["a", "b", "c", "c"]:
            ranking.reconcile(index.increment(address))

        order = [e.address for e in ranking.snapshot()]
        assert order[0] == "c"
        assert len(ranking) == 3
        assert_heap_valid(ranking)

    def test_equal_count_outsider_is_not_admitted(self):
        """At capacity, an outsider tying the minimum is ignored"""
        index = CountIndex()
        ranking = BoundedRanking(2)
        evicted = [ranking.reconcile(index.increment(a)) for a in ["a", "b", "c"]]

        assert evicted == [None, None, None]
        assert "c" not in ranking
        assert [e.address for e in ranking.snapshot()] == ["a", "b"]

    def test_outsider_with_higher_count_evicts_minimum(self):
        """At capacity, a higher-count outsider replaces the minimum"""
        index = CountIndex()
        ranking = BoundedRanking(2)
        for address in ["a", "a", "b", "c"]:
            ranking.reconcile(index.increment(address))
        assert "c" not in ranking

        evicted = ranking.reconcile(index.increment("c"))

        assert evicted is not None
        assert evicted.address == "b"
        assert "b" not in ranking
        assert [e.address for e in ranking.snapshot()] == ["a", "c"]
        assert_heap_valid(ranking)

    def test_tie_break_prefers_earlier(self):
        """Equal counts: the entry that reached the count first ranks higher"""
        index = CountIndex()
        ranking = BoundedRanking(5)
        for address in ["x", "y", "z", "y", "x"]:
            ranking.reconcile(index.increment(address))

        # y reached 2 before x did
        assert [e.address for e in ranking.snapshot()] == ["y", "x", "z"]

    def test_tie_break_evicts_most_recent_at_minimum(self):
        """Eviction picks the most recently incremented lowest-count member"""
        index = CountIndex()
        ranking = BoundedRanking(3)
        for address in ["a", "b", "c", "d", "d"]:
            ranking.reconcile(index.increment(address))

        # a, b, c all at 1; c was incremented last
        assert "c" not in ranking
        assert [e.address for e in ranking.snapshot()] == ["d", "a", "b"]

    def test_snapshot_is_independent(self):
        """Each snapshot is a fresh iterator fixed at call time"""
        index = CountIndex()
        ranking = BoundedRanking(3)
        ranking.reconcile(index.increment("a"))

        first = ranking.snapshot()
        ranking.reconcile(index.increment("b"))
        second = ranking.snapshot()

        assert [e.address for e in first] == ["a"]
        assert [e.address for e in second] == ["a", "b"]
        assert list(first) == []

    def test_peek_min(self):
        """Root of the heap is the lowest count"""
        index = CountIndex()
        ranking = BoundedRanking(3)
        assert ranking.peek_min() is None

        for address in ["a", "a", "b", "c", "c", "c"]:
            ranking.reconcile(index.increment(address))

        assert ranking.peek_min().address == "b"

    def test_clear(self):
        """Clear empties the ranking"""
        index = CountIndex()
        ranking = BoundedRanking(3)
        ranking.reconcile(index.increment("a"))
        ranking.clear()

        assert len(ranking) == 0
        assert "a" not in ranking
        assert list(ranking.snapshot()) == []

    def test_random_stream_keeps_heap_valid(self):
        """Heap invariant holds across a long random stream"""
        rng = random.Random(7)
        index = CountIndex()
        ranking = BoundedRanking(10)
        for _ in range(5000):
            ranking.reconcile(index.increment(f"10.0.{rng.randint(0, 3)}.{rng.randint(0, 20)}"))
            assert len(ranking) <= 10

        assert_heap_valid(ranking)

        counts = [e.count for e in ranking.snapshot()]
        assert counts == sorted(counts, reverse=True)

        # nothing outside the ranking beats anything inside it
        floor = min(counts)
        outside = [e.count for a, e in index.entries.items() if a not in ranking]
        assert all(c <= floor for c in outside)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
