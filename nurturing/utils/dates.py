"""
Date helpers.

All timestamps are stored as naive UTC datetimes.
"""

from datetime import datetime
import pytz


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(pytz.utc).replace(tzinfo=None)
