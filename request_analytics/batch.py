from __future__ import annotations
from typing import List
import asyncio, logging

from request_analytics.errors import StoreError
from request_analytics.schemas import ApiRequest
from request_analytics.store import RequestStore

logger = logging.getLogger(__name__)

def drain(queue: "asyncio.Queue[ApiRequest]") -> List[ApiRequest]:
    """Take everything currently queued, in FIFO order, without waiting."""
    batch: List[ApiRequest] = []
    while True:
        try:
            batch.append(queue.get_nowait())
        except asyncio.QueueEmpty:
            break
        queue.task_done()
    return batch

def write_batch(store: RequestStore, batch: List[ApiRequest]) -> int:
    if not batch:
        return 0
    with store.update() as tx:
        tx.put_many(r.to_json() for r in batch)
    return len(batch)

async def flush(queue: "asyncio.Queue[ApiRequest]", store: RequestStore) -> int:
    batch = drain(queue)
    if not batch:
        return 0
    try:
        await asyncio.to_thread(write_batch, store, batch)
    except StoreError:
        logger.error("dropping batch of %d requests after failed write", len(batch))
        raise
    logger.debug("flushed %d requests", len(batch))
    return len(batch)
