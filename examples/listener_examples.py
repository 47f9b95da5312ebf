"""
Examples of top-talker tracking with RequestListener

Demonstrates recording, ranking, eviction and epoch resets
"""
import random
from datetime import datetime, timezone
from threading import Thread

from toptalkers.core.listener import RequestListener
from toptalkers.core.scheduler import EpochScheduler
from toptalkers.utils.time_windows import TimeWindow


def example_1_basic_ranking():
    """
    Example 1: Record a few requests and read the ranking

    Use case: Which clients hit the service most today?
    """
    print("=" * 60)
    print("Example 1: Basic Ranking")
    print("=" * 60)

    listener = RequestListener(limit=100)
    for address in ["10.0.0.1", "10.0.0.1", "10.0.0.2", "10.0.0.1"]:
        listener.record(address)

    for address, count in listener.ranked_counts():
        print(f"  {address}: {count} requests")
    print()


def example_2_bounded_ranking():
    """
    Example 2: Many distinct addresses, only the top N are kept

    Use case: Skewed traffic from 10,000 clients, top 5 reported
    """
    print("=" * 60)
    print("Example 2: Bounded Ranking (N=5)")
    print("=" * 60)

    rng = random.Random(42)
    listener = RequestListener(limit=5)
    for _ in range(100_000):
        # Pareto-ish skew: low addresses are much hotter
        host = min(int(rng.paretovariate(1.2)), 10_000)
        listener.record(f"192.168.{host // 256}.{host % 256}")

    stats = listener.stats()
    print(f"  Distinct addresses: {stats.distinct_addresses}")
    print(f"  Total requests:     {stats.total_requests}")
    for address, count in listener.ranked_counts():
        print(f"    {address}: {count}")
    print()


def example_3_concurrent_workers():
    """
    Example 3: Several request workers recording at once

    Use case: Threaded web server calling record() per request
    """
    print("=" * 60)
    print("Example 3: Concurrent Workers")
    print("=" * 60)

    listener = RequestListener(limit=10)

    def worker(n):
        for _ in range(10_000):
            listener.record(f"10.0.0.{n % 3}")

    threads = [Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    for address, count in listener.ranked_counts():
        print(f"  {address}: {count}")
    print(f"  Total: {listener.stats().total_requests} (expected 80000)")
    print()


def example_4_daily_reset():
    """
    Example 4: Window rollover resets the counts

    Use case: Daily top talkers, reset at midnight UTC
    """
    print("=" * 60)
    print("Example 4: Daily Reset")
    print("=" * 60)

    listener = RequestListener(limit=10)
    scheduler = EpochScheduler(listener, window=TimeWindow.DAY)

    scheduler.check(datetime(2025, 10, 16, 23, 59, tzinfo=timezone.utc))
    listener.record("10.0.0.1")
    print(f"  Before midnight: {listener.rank()}")

    scheduler.check(datetime(2025, 10, 17, 0, 0, 1, tzinfo=timezone.utc))
    print(f"  After midnight:  {listener.rank()} (epoch {listener.stats().epoch})")
    print()


if __name__ == "__main__":
    example_1_basic_ranking()
    example_2_bounded_ranking()
    example_3_concurrent_workers()
    example_4_daily_reset()

    print("=" * 60)
    print("All examples completed!")
    print("=" * 60)
