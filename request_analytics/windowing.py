from __future__ import annotations
from bisect import bisect_right
from datetime import datetime, timezone, timedelta
from typing import List, Optional, Sequence

DAY = timedelta(days=1)

def _utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)

def utc_midnight(now: datetime) -> datetime:
    now = _utc(now)
    return datetime(now.year, now.month, now.day, tzinfo=timezone.utc)

def to_ms(ts: datetime) -> int:
    ts = _utc(ts)
    delta = ts - datetime(1970, 1, 1, tzinfo=timezone.utc)
    return (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000

def day_boundaries(now: datetime, days: int = 14) -> List[datetime]:
    """UTC midnights of the trailing ``days`` days, oldest first, ending with today."""
    today = utc_midnight(now)
    return [today - DAY * (days - 1 - i) for i in range(days)]

def day_label(day: datetime) -> str:
    return day.strftime("%m/%d")

def bucket_index(ts_ms: int, boundaries_ms: Sequence[int]) -> Optional[int]:
    # bucket j covers [B[j], B[j+1]); the last one is open-ended
    idx = bisect_right(boundaries_ms, ts_ms) - 1
    if idx < 0:
        return None
    return idx
