from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Set

from request_analytics.schemas import ApiRequest
from request_analytics.windowing import bucket_index, day_label, to_ms

@dataclass
class DayBucket:
    count: int = 0
    callers: Set[str] = field(default_factory=set)

    @property
    def uniques(self) -> int:
        return len(self.callers)

    def add(self, caller_id: str) -> None:
        self.count += 1
        self.callers.add(caller_id)

class DailyState:
    """Per-day totals and distinct callers for one report computation."""

    def __init__(self, boundaries: List[datetime]):
        self.boundaries = boundaries
        self._bounds_ms = [to_ms(b) for b in boundaries]
        self.buckets = [DayBucket() for _ in boundaries]
        self.skipped = 0

    def update(self, req: ApiRequest) -> Optional[int]:
        idx = bucket_index(req.timestamp, self._bounds_ms)
        if idx is None:
            self.skipped += 1
            return None
        self.buckets[idx].add(req.caller_id)
        return idx

    def dates(self) -> List[str]:
        return [day_label(b) for b in self.boundaries]

    def totals(self) -> List[int]:
        return [b.count for b in self.buckets]

    def uniques(self) -> List[int]:
        return [b.uniques for b in self.buckets]
