from __future__ import annotations
from datetime import datetime, timezone
from typing import Iterable, List, Optional
import logging
import orjson

from request_analytics.errors import ReportError
from request_analytics.schemas import ApiRequest, ChartData
from request_analytics.state import DailyState
from request_analytics.store import RequestStore
from request_analytics.windowing import day_boundaries

logger = logging.getLogger(__name__)

def load_requests(store: RequestStore) -> List[ApiRequest]:
    out = []
    with store.view() as tx:
        rows = tx.items()
    for key, raw in rows:
        try:
            out.append(ApiRequest.from_json(raw))
        except ValueError as e:
            logger.warning("skipping undecodable request %s: %s", key, e)
    return out

def _encode_series(series: List[int]) -> str:
    try:
        return orjson.dumps(series).decode("utf-8")
    except (orjson.JSONEncodeError, UnicodeDecodeError) as e:
        raise ReportError(f"cannot encode series: {e}") from e

def build_chart(requests: Iterable[ApiRequest], now: datetime, days: int = 14) -> ChartData:
    if days < 1:
        raise ReportError(f"report window must cover at least one day, got {days}")
    state = DailyState(day_boundaries(now, days))
    for req in requests:
        state.update(req)
    if state.skipped:
        logger.debug("%d requests fell outside the %d-day window", state.skipped, days)

    dates = state.dates()
    return ChartData(
        dates=dates,
        unique=_encode_series(state.uniques()),
        total=_encode_series(state.totals()),
        from_=dates[0],
        to=dates[-1],
    )

def chart_data(store: RequestStore, now: Optional[datetime] = None, days: int = 14) -> ChartData:
    """Daily totals and unique callers for the trailing ``days`` UTC days, oldest first."""
    now = now or datetime.now(timezone.utc)
    return build_chart(load_requests(store), now, days)
