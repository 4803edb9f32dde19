from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import List, Optional
import logging

from request_analytics.schemas import ApiRequest
from request_analytics.store import RequestStore
from request_analytics.windowing import to_ms

logger = logging.getLogger(__name__)

def prune(store: RequestStore, threshold: timedelta, now: Optional[datetime] = None) -> int:
    """Delete every stored request strictly older than ``now - threshold``.

    Undecodable values are left in place and logged.
    """
    now = now or datetime.now(timezone.utc)
    cutoff_ms = to_ms(now - threshold)

    with store.update() as tx:
        stale: List[int] = []
        for key, raw in tx.items():
            try:
                req = ApiRequest.from_json(raw)
            except ValueError as e:
                logger.warning("prune skipping undecodable request %s: %s", key, e)
                continue
            if req.timestamp < cutoff_ms:
                stale.append(key)
        if stale:
            tx.delete_many(stale)
        remaining = tx.count()

    if stale:
        logger.info("pruned %d requests older than %s, %d kept", len(stale), threshold, remaining)
    return len(stale)
