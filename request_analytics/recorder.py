from __future__ import annotations
from typing import Callable, Optional
import asyncio, time

from request_analytics.schemas import ApiRequest, RequestSource

def now_ms() -> int:
    return int(time.time() * 1000)

def is_external(path: str, marker: str = "/external/") -> bool:
    return marker in path

def build_request(source: RequestSource, timestamp: int, external_marker: str = "/external/") -> ApiRequest:
    return ApiRequest(
        url=source.url,
        method=source.method,
        origin=source.origin,
        protocol=source.protocol,
        caller_id=source.remote_addr,
        timestamp=timestamp,
        external=is_external(source.path, external_marker),
    )

class Recorder:
    """Turns request descriptions into ApiRequest records on the bounded queue.

    ``record`` never touches the store. When the queue is full it waits for
    the next flush to make room instead of dropping the event.
    """

    def __init__(self, queue: "asyncio.Queue[ApiRequest]", external_marker: str = "/external/",
                 clock: Optional[Callable[[], int]] = None):
        self.queue = queue
        self.external_marker = external_marker
        self.clock = clock or now_ms

    async def record(self, source: RequestSource) -> None:
        req = build_request(source, self.clock(), self.external_marker)
        await self.queue.put(req)
