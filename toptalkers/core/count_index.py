"""
Unbounded address -> count index
"""
from typing import Dict, Optional

from toptalkers.core.entries import CountEntry


class CountIndex:
    """
    Hash index of every address seen in the current epoch

    Grows with the number of distinct addresses. Entries are created on
    first sight and then only ever mutated, never replaced.
    """

    def __init__(self):
        self.entries: Dict[str, CountEntry] = {}
        self.total = 0
        self._sequence = 0

    def increment(self, address: str) -> CountEntry:
        """
        Add one to the count of an address

        Args:
            address: Opaque address key (any string, including "")

        Returns:
            The entry for the address, created with count 1 if new
        """
        entry = self.entries.get(address)
        if entry is None:
            entry = CountEntry(address)
            self.entries[address] = entry

        self._sequence += 1
        entry.count += 1
        entry.stamp = self._sequence
        self.total += 1
        return entry

    def get(self, address: str) -> Optional[CountEntry]:
        """Get the live entry for an address, or None if unseen"""
        return self.entries.get(address)

    def count(self, address: str) -> int:
        """Current count for an address (0 if unseen)"""
        entry = self.entries.get(address)
        return entry.count if entry is not None else 0

    def clear(self) -> None:
        """Remove all entries"""
        self.entries.clear()
        self.total = 0
        self._sequence = 0

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, address: str) -> bool:
        return address in self.entries
