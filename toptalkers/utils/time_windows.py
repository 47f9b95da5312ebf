"""
Time window utilities for epoch reset boundaries
"""
from datetime import datetime, timedelta
from enum import Enum


class TimeWindow(str, Enum):
    """Time window types"""

    MINUTE = "1m"
    FIVE_MINUTES = "5m"
    FIFTEEN_MINUTES = "15m"
    HOUR = "1h"
    DAY = "1d"
    WEEK = "1w"
    MONTH = "1M"


class TimeWindowBucketer:
    """
    Utility for bucketing timestamps into time windows
    Used to decide when a counting epoch has ended
    """

    @staticmethod
    def bucket_timestamp(timestamp: datetime, window: TimeWindow) -> str:
        """
        Convert timestamp to window bucket string

        Args:
            timestamp: Datetime to bucket
            window: Time window type

        Returns:
            Bucket string (e.g., "2025-10-16T10:00:00" for hourly)
        """
        if window == TimeWindow.MINUTE:
            return timestamp.strftime("%Y-%m-%dT%H:%M:00")
        elif window == TimeWindow.FIVE_MINUTES:
            minute = (timestamp.minute // 5) * 5
            return timestamp.strftime(f"%Y-%m-%dT%H:{minute:02d}:00")
        elif window == TimeWindow.FIFTEEN_MINUTES:
            minute = (timestamp.minute // 15) * 15
            return timestamp.strftime(f"%Y-%m-%dT%H:{minute:02d}:00")
        elif window == TimeWindow.HOUR:
            return timestamp.strftime("%Y-%m-%dT%H:00:00")
        elif window == TimeWindow.DAY:
            return timestamp.strftime("%Y-%m-%d")
        elif window == TimeWindow.WEEK:
            # ISO week format
            year, week, _ = timestamp.isocalendar()
            return f"{year}-W{week:02d}"
        elif window == TimeWindow.MONTH:
            return timestamp.strftime("%Y-%m")
        else:
            raise ValueError(f"Unknown window type: {window}")

    @staticmethod
    def parse_window_string(window_str: str) -> TimeWindow:
        """
        Parse window string to TimeWindow enum

        Args:
            window_str: String like "1h", "1d", "1w"

        Returns:
            TimeWindow enum
        """
        try:
            return TimeWindow(window_str)
        except ValueError:
            raise ValueError(
                f"Invalid window: {window_str}. "
                f"Valid options: {[w.value for w in TimeWindow]}"
            )

    @staticmethod
    def get_window_duration(window: TimeWindow) -> timedelta:
        """
        Get timedelta for a window type

        Args:
            window: TimeWindow enum

        Returns:
            timedelta representing window duration
        """
        durations = {
            TimeWindow.MINUTE: timedelta(minutes=1),
            TimeWindow.FIVE_MINUTES: timedelta(minutes=5),
            TimeWindow.FIFTEEN_MINUTES: timedelta(minutes=15),
            TimeWindow.HOUR: timedelta(hours=1),
            TimeWindow.DAY: timedelta(days=1),
            TimeWindow.WEEK: timedelta(weeks=1),
            TimeWindow.MONTH: timedelta(days=30),  # Approximate
        }
        return durations[window]

    @staticmethod
    def get_bucket_start(timestamp: datetime, window: TimeWindow) -> datetime:
        """
        Get the first instant of the bucket containing a timestamp

        Args:
            timestamp: Datetime to bucket (timezone is preserved)
            window: Time window type

        Returns:
            Start of the bucket
        """
        start = timestamp.replace(second=0, microsecond=0)
        if window == TimeWindow.MINUTE:
            return start
        elif window == TimeWindow.FIVE_MINUTES:
            return start.replace(minute=(start.minute // 5) * 5)
        elif window == TimeWindow.FIFTEEN_MINUTES:
            return start.replace(minute=(start.minute // 15) * 15)
        elif window == TimeWindow.HOUR:
            return start.replace(minute=0)

        start = start.replace(hour=0, minute=0)
        if window == TimeWindow.DAY:
            return start
        elif window == TimeWindow.WEEK:
            # ISO weeks start on Monday
            return start - timedelta(days=start.weekday())
        elif window == TimeWindow.MONTH:
            return start.replace(day=1)
        else:
            raise ValueError(f"Unknown window type: {window}")

    @staticmethod
    def get_next_boundary(timestamp: datetime, window: TimeWindow) -> datetime:
        """
        Get the start of the bucket after the one containing a timestamp

        Args:
            timestamp: Reference datetime
            window: Time window type

        Returns:
            Start of the next bucket
        """
        start = TimeWindowBucketer.get_bucket_start(timestamp, window)
        if window == TimeWindow.MONTH:
            if start.month == 12:
                return start.replace(year=start.year + 1, month=1)
            return start.replace(month=start.month + 1)

        return start + TimeWindowBucketer.get_window_duration(window)
