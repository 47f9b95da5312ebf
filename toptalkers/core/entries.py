"""
Per-address count record shared by the count index and the ranking heap
"""


class CountEntry:
    """
    Running request count for one address

    The same object is referenced from the count index and, while it is
    ranked, from the ranking heap. It is mutated in place for the whole
    epoch so both holders always see the current count.

    Identity is the address alone.
    """

    __slots__ = ("address", "count", "stamp")

    def __init__(self, address: str, count: int = 0, stamp: int = 0):
        self.address = address
        self.count = count
        # sequence number of the increment that produced `count`
        self.stamp = stamp

    def rank_key(self) -> tuple:
        """
        Ordering key, smallest first is the eviction candidate

        Lower count sorts first; among equal counts the entry that reached
        the count most recently sorts first.
        """
        return (self.count, -self.stamp)

    def __eq__(self, other):
        if not isinstance(other, CountEntry):
            return NotImplemented
        return self.address == other.address

    def __hash__(self):
        return hash(self.address)

    def __repr__(self):
        return f"CountEntry(address={self.address!r}, count={self.count})"
