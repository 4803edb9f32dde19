from __future__ import annotations
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, HTTPException

from request_analytics.errors import ReportError, StoreError
from request_analytics.middleware import AnalyticsMiddleware
from request_analytics.service import AnalyticsService

def create_app(service: Optional[AnalyticsService] = None) -> FastAPI:
    service = service or AnalyticsService()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await service.start()
        try:
            yield
        finally:
            await service.close()

    app = FastAPI(title="Request Analytics API", version="1.0.0", lifespan=lifespan)
    app.state.analytics = service
    app.add_middleware(AnalyticsMiddleware, service=service)

    @app.get("/health")
    def health():
        return {"ok": not service.store.closed}

    @app.get("/v1/chart")
    def chart():
        try:
            return service.report()
        except (ReportError, StoreError) as e:
            raise HTTPException(status_code=500, detail=str(e))

    @app.post("/v1/flush")
    async def flush_now():
        try:
            return {"flushed": await service.flush_now()}
        except StoreError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.post("/v1/prune")
    async def prune_now():
        try:
            return {"pruned": await service.prune_now()}
        except StoreError as e:
            raise HTTPException(status_code=503, detail=str(e))

    return app
