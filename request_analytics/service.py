from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, Optional
import asyncio, logging

from request_analytics.batch import flush
from request_analytics.config import Settings, settings as default_settings
from request_analytics.recorder import Recorder
from request_analytics.report import chart_data
from request_analytics.retention import prune
from request_analytics.runner import Scheduler
from request_analytics.schemas import ApiRequest, RequestSource
from request_analytics.store import RequestStore

logger = logging.getLogger(__name__)

class AnalyticsService:
    """Owns the request store, the bounded queue and the background scheduler.

    ``start`` must run inside the event loop that will call ``record``.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.s = settings or default_settings
        self.store = RequestStore(self.s.db_path)
        self.queue: Optional["asyncio.Queue[ApiRequest]"] = None
        self.recorder: Optional[Recorder] = None
        self.scheduler: Optional[Scheduler] = None

    def open(self) -> None:
        """Open the store and allocate the queue; raises StoreInitError."""
        self.store.open()
        if self.queue is None:
            self.queue = asyncio.Queue(maxsize=self.s.queue_capacity())
            self.recorder = Recorder(self.queue, external_marker=self.s.external_path_marker)

    async def start(self) -> None:
        self.open()
        if self.scheduler is None:
            self.scheduler = Scheduler(
                self.queue,
                self.store,
                flush_interval=self.s.flush_interval_seconds,
                prune_interval=self.s.prune_interval_seconds,
                retention=self.s.retention,
            )
        self.scheduler.start()

    async def close(self) -> None:
        if self.scheduler is not None:
            try:
                await self.scheduler.stop()
            except Exception:
                logger.exception("scheduler did not stop cleanly")
        if self.queue is not None and self.queue.qsize():
            logger.warning("discarding %d unflushed requests on close", self.queue.qsize())
        self.store.close()

    async def record(self, source: RequestSource) -> None:
        assert self.recorder is not None, "AnalyticsService.open() was not called"
        await self.recorder.record(source)

    async def flush_now(self) -> int:
        assert self.queue is not None
        return await flush(self.queue, self.store)

    async def prune_now(self) -> int:
        return await asyncio.to_thread(prune, self.store, self.s.retention)

    def report(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        return chart_data(self.store, now=now, days=self.s.report_days).as_dict()
