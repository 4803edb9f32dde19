from __future__ import annotations
from datetime import timedelta
from typing import Optional
import asyncio, logging

from request_analytics.batch import flush
from request_analytics.retention import prune
from request_analytics.schemas import ApiRequest
from request_analytics.store import RequestStore

logger = logging.getLogger(__name__)

class Scheduler:
    """Background task with two independent periodic timers.

    The flush timer drains the queue into the store; the prune timer drops
    records older than ``retention``. A failing tick is logged and the loop
    keeps going until ``stop`` is called.
    """

    def __init__(self, queue: "asyncio.Queue[ApiRequest]", store: RequestStore,
                 flush_interval: float, prune_interval: float, retention: timedelta):
        if flush_interval <= 0 or prune_interval <= 0:
            raise ValueError(f"scheduler intervals must be positive, got flush={flush_interval} prune={prune_interval}")
        self.queue = queue
        self.store = store
        self.flush_interval = flush_interval
        self.prune_interval = prune_interval
        self.retention = retention

        self._stop = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._task = asyncio.create_task(self.run_forever(), name="analytics-scheduler")

    async def stop(self) -> None:
        self._stop.set()
        if self._task is not None:
            await self._task
            self._task = None

    async def run_forever(self) -> None:
        loop = asyncio.get_running_loop()
        next_flush = loop.time() + self.flush_interval
        next_prune = loop.time() + self.prune_interval
        logger.info("scheduler started: flush every %ss, prune every %ss", self.flush_interval, self.prune_interval)

        while not self._stop.is_set():
            timeout = max(0.0, min(next_flush, next_prune) - loop.time())
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=timeout)
                break
            except asyncio.TimeoutError:
                pass

            now = loop.time()
            if now >= next_flush:
                await self.flush_once()
                next_flush = _next_deadline(next_flush, self.flush_interval, loop.time())
            if now >= next_prune:
                await self.prune_once()
                next_prune = _next_deadline(next_prune, self.prune_interval, loop.time())

        logger.info("scheduler stopped")

    async def flush_once(self) -> int:
        try:
            return await flush(self.queue, self.store)
        except Exception:
            logger.exception("flush failed")
            return 0

    async def prune_once(self) -> int:
        try:
            return await asyncio.to_thread(prune, self.store, self.retention)
        except Exception:
            logger.exception("prune failed")
            return 0

def _next_deadline(deadline: float, interval: float, now: float) -> float:
    # skip ticks missed while a slow flush or prune was running
    deadline += interval
    while deadline <= now:
        deadline += interval
    return deadline
