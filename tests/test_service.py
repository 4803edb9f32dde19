import asyncio, json
import pytest
from request_analytics.config import Settings
from request_analytics.errors import StoreInitError
from request_analytics.schemas import RequestSource
from request_analytics.service import AnalyticsService
from conftest import stored_requests

def _settings(tmp_path, **kw):
    return Settings(db_path=str(tmp_path / "svc.db"), flush_interval_seconds=3600, **kw)

def _source(i):
    return RequestSource(url=f"http://api.local/v1/items/{i}", path=f"/v1/items/{i}", method="GET",
                         remote_addr=f"10.0.{i % 7}.1:{1000 + i}")

def test_concurrent_records_are_flushed_exactly_once(tmp_path):
    svc = AnalyticsService(_settings(tmp_path))

    async def main():
        await svc.start()
        await asyncio.gather(*(svc.record(_source(i)) for i in range(200)))
        first = await svc.flush_now()
        second = await svc.flush_now()
        rows = stored_requests(svc.store)
        await svc.close()
        return first, second, rows

    first, second, rows = asyncio.run(main())
    assert first == 200 and second == 0
    assert sorted(r.url for r in rows) == sorted(f"http://api.local/v1/items/{i}" for i in range(200))

def test_report_shape_after_flush(tmp_path):
    svc = AnalyticsService(_settings(tmp_path))

    async def main():
        await svc.start()
        for i in range(3):
            await svc.record(_source(0))
        await svc.flush_now()
        data = svc.report()
        await svc.close()
        return data

    data = asyncio.run(main())
    assert set(data) == {"dates", "unique", "total", "from", "to"}
    assert json.loads(data["total"])[-1] == 3
    assert json.loads(data["unique"])[-1] == 1

def test_queue_capacity_scales_with_cpus(tmp_path, monkeypatch):
    monkeypatch.setattr("os.cpu_count", lambda: 4)
    svc = AnalyticsService(_settings(tmp_path, queue_capacity_per_cpu=10))
    svc.open()
    assert svc.queue.maxsize == 40
    svc.store.close()

def test_start_fails_when_store_cannot_open(tmp_path):
    (tmp_path / "file").write_text("")
    svc = AnalyticsService(Settings(db_path=str(tmp_path / "file" / "svc.db")))
    with pytest.raises(StoreInitError):
        asyncio.run(svc.start())

def test_close_discards_pending_and_is_quiet(tmp_path, caplog):
    svc = AnalyticsService(_settings(tmp_path))

    async def main():
        await svc.start()
        await svc.record(_source(1))
        await svc.close()
        await svc.close()

    asyncio.run(main())
    assert svc.store.closed
    assert any("unflushed" in r.message for r in caplog.records)
