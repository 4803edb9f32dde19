from __future__ import annotations
from typing import Iterable
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from request_analytics.schemas import RequestSource

def source_from_request(request: Request) -> RequestSource:
    client = request.client
    remote_addr = f"{client.host}:{client.port}" if client else ""
    http_version = request.scope.get("http_version", "1.1")
    return RequestSource(
        url=str(request.url),
        path=request.url.path,
        method=request.method,
        origin=request.headers.get("origin", ""),
        protocol=f"HTTP/{http_version}",
        remote_addr=remote_addr,
    )

class AnalyticsMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, service, skip_paths: Iterable[str] = ("/health",)):
        super().__init__(app)
        self.service = service
        self.skip_paths = frozenset(skip_paths)

    async def dispatch(self, request: Request, call_next):
        if request.url.path not in self.skip_paths:
            await self.service.record(source_from_request(request))
        return await call_next(request)
