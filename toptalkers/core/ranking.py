"""
Bounded top-N ranking over live count entries

Indexed binary min-heap: the root is always the eviction candidate, and a
side index from address to heap slot makes membership checks O(1) and
repositioning an updated member O(log N).
"""
from typing import Dict, Iterator, List, Optional

from toptalkers.core.entries import CountEntry


class BoundedRanking:
    """
    Holds the (at most) N entries with the highest counts

    Entries are the live objects owned by the count index, so a member's
    count may already have changed when reconcile() is called for it.
    Only the entry passed to reconcile() may have changed since the last
    call; the heap relies on that to restore order locally.

    Tie-break: among equal counts, the entry that reached the count first
    ranks higher, so the most recently incremented of the lowest-count
    members is evicted first. An outsider whose count merely equals the
    minimum never displaces a member.
    """

    def __init__(self, capacity: int = 100):
        """
        Initialize ranking

        Args:
            capacity: Maximum number of ranked entries (N)
        """
        if capacity < 1:
            raise ValueError(f"Ranking capacity must be at least 1, got {capacity}")

        self.capacity = capacity
        self._heap: List[CountEntry] = []
        self._slots: Dict[str, int] = {}

    def reconcile(self, entry: CountEntry) -> Optional[CountEntry]:
        """
        Restore the top-N invariant after `entry` was incremented

        Args:
            entry: The entry whose count just changed

        Returns:
            The entry evicted to make room, if any
        """
        slot = self._slots.get(entry.address)
        if slot is not None:
            # count only grows, so the entry can only move away from the root
            self._sift_down(slot)
            return None

        if len(self._heap) < self.capacity:
            self._heap.append(entry)
            self._sift_up(len(self._heap) - 1)
            return None

        weakest = self._heap[0]
        if entry.count <= weakest.count:
            return None

        del self._slots[weakest.address]
        self._heap[0] = entry
        self._sift_down(0)
        return weakest

    def snapshot(self) -> Iterator[CountEntry]:
        """
        Ranked entries, highest count first

        The order is fixed when this is called; each call returns a new,
        independent iterator.
        """
        ordered = sorted(self._heap, key=CountEntry.rank_key, reverse=True)
        return iter(ordered)

    def peek_min(self) -> Optional[CountEntry]:
        """Current eviction candidate, or None when empty"""
        return self._heap[0] if self._heap else None

    def clear(self) -> None:
        """Drop all members"""
        self._heap = []
        self._slots = {}

    def __contains__(self, address: str) -> bool:
        return address in self._slots

    def __len__(self) -> int:
        return len(self._heap)

    def _place(self, pos: int, entry: CountEntry) -> None:
        self._heap[pos] = entry
        self._slots[entry.address] = pos

    def _sift_up(self, pos: int) -> None:
        heap = self._heap
        entry = heap[pos]
        key = entry.rank_key()
        while pos > 0:
            parent = (pos - 1) >> 1
            if key < heap[parent].rank_key():
                self._place(pos, heap[parent])
                pos = parent
            else:
                break
        self._place(pos, entry)

    def _sift_down(self, pos: int) -> None:
        heap = self._heap
        size = len(heap)
        entry = heap[pos]
        key = entry.rank_key()
        while True:
            child = 2 * pos + 1
            if child >= size:
                break
            right = child + 1
            if right < size and heap[right].rank_key() < heap[child].rank_key():
                child = right
            if heap[child].rank_key() < key:
                self._place(pos, heap[child])
                pos = child
            else:
                break
        self._place(pos, entry)
