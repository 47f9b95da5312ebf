"""
Request listener: counts requests per address and ranks the top talkers

This is the component the web layer calls once per inbound request.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock
from typing import List, Tuple
import logging

from toptalkers.core.count_index import CountIndex
from toptalkers.core.ranking import BoundedRanking

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100


class InvalidAddressError(ValueError):
    """Raised when record() is given a missing or non-string address."""


@dataclass(frozen=True)
class ListenerStats:
    """Point-in-time copy of listener counters"""

    epoch: int
    epoch_started_at: datetime
    distinct_addresses: int
    total_requests: int
    capacity: int
    ranked: int


class RequestListener:
    """
    Tracks request counts per address since the last epoch reset

    All state lives behind a single lock. record() holds it for one index
    increment plus one O(log N) ranking update; rank() and reset_epoch()
    hold it for O(N log N) and O(1) respectively. Callers only ever get
    copies of the internal state.

    Example usage:
        listener = RequestListener(limit=100)
        listener.record("145.87.2.109")
        listener.rank()          # ["145.87.2.109"]
        listener.reset_epoch()   # start of a new day
    """

    def __init__(self, limit: int = DEFAULT_LIMIT):
        """
        Initialize listener

        Args:
            limit: Number of top addresses to keep ranked (N)
        """
        self.limit = limit
        self._lock = Lock()
        self._index = CountIndex()
        self._ranking = BoundedRanking(limit)
        self._epoch = 1
        self._epoch_started_at = datetime.now(tz=timezone.utc)

    def record(self, address: str) -> int:
        """
        Count one request from an address

        Args:
            address: Client address such as "145.87.2.109". Any string is a
                valid key, the empty string included.

        Returns:
            The address's count including this request

        Raises:
            InvalidAddressError: address is None or not a string
        """
        if not isinstance(address, str):
            raise InvalidAddressError(
                f"Address must be a string, got {type(address).__name__}"
            )

        with self._lock:
            entry = self._index.increment(address)
            evicted = self._ranking.reconcile(entry)
            count = entry.count

        if evicted is not None:
            logger.debug(f"Address {address} displaced {evicted.address} from the ranking")
        return count

    def rank(self) -> List[str]:
        """
        Top addresses, highest request count first

        Returns:
            New list of at most `limit` addresses
        """
        with self._lock:
            return [entry.address for entry in self._ranking.snapshot()]

    def ranked_counts(self) -> List[Tuple[str, int]]:
        """
        Top addresses with their counts, highest first

        Returns:
            New list of (address, count) tuples
        """
        with self._lock:
            return [(entry.address, entry.count) for entry in self._ranking.snapshot()]

    def epoch_ranking(self) -> Tuple[int, List[Tuple[str, int]]]:
        """
        Epoch number and ranked (address, count) pairs, read together

        Returns:
            (epoch, ranking) where the ranking belongs to that epoch
        """
        with self._lock:
            return self._epoch, [(e.address, e.count) for e in self._ranking.snapshot()]

    def lookup(self, address: str) -> Tuple[int, int, bool]:
        """
        Epoch, count and ranked flag of an address, read together

        Returns:
            (epoch, count, ranked)
        """
        with self._lock:
            return self._epoch, self._index.count(address), address in self._ranking

    def count(self, address: str) -> int:
        """Requests seen from an address in the current epoch"""
        with self._lock:
            return self._index.count(address)

    def is_ranked(self, address: str) -> bool:
        """Whether an address is currently in the top-N"""
        with self._lock:
            return address in self._ranking

    def reset_epoch(self) -> int:
        """
        Discard all counts and start a new epoch

        Fresh structures are swapped in under the record lock, so no
        increment can land on a discarded entry.

        Returns:
            The number of the epoch just started
        """
        index = CountIndex()
        ranking = BoundedRanking(self.limit)
        started_at = datetime.now(tz=timezone.utc)

        with self._lock:
            previous = self._index
            self._index = index
            self._ranking = ranking
            self._epoch += 1
            self._epoch_started_at = started_at
            epoch = self._epoch

        logger.info(
            f"Started epoch {epoch}; previous epoch saw {len(previous)} addresses, "
            f"{previous.total} requests"
        )
        return epoch

    def stats(self) -> ListenerStats:
        """Snapshot of the current epoch's counters"""
        with self._lock:
            return ListenerStats(
                epoch=self._epoch,
                epoch_started_at=self._epoch_started_at,
                distinct_addresses=len(self._index),
                total_requests=self._index.total,
                capacity=self.limit,
                ranked=len(self._ranking),
            )

    # Names used by the original listener interface
    request_handler = record
    top = rank
    clear = reset_epoch
