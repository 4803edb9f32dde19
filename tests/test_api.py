import json
from fastapi.testclient import TestClient
from request_analytics.api import create_app
from request_analytics.config import Settings
from request_analytics.service import AnalyticsService
from conftest import stored_requests

def _app(tmp_path):
    svc = AnalyticsService(Settings(db_path=str(tmp_path / "api.db"), flush_interval_seconds=3600))
    app = create_app(svc)

    @app.get("/api/external/ping")
    def ping():
        return {"pong": True}

    return app, svc

def test_requests_are_recorded_and_charted(tmp_path):
    app, svc = _app(tmp_path)
    with TestClient(app) as client:
        assert client.get("/health").json() == {"ok": True}
        client.get("/api/external/ping", headers={"Origin": "https://dash.local"})
        client.get("/v1/chart")

        assert client.post("/v1/flush").json() == {"flushed": 3}
        rows = stored_requests(svc.store)

        data = client.get("/v1/chart").json()

    assert len(data["dates"]) == 14
    assert json.loads(data["total"])[-1] == 3
    assert json.loads(data["unique"])[-1] == 1

    ping = rows[0]
    assert ping.external is True
    assert ping.method == "GET"
    assert ping.origin == "https://dash.local"
    assert ping.url.endswith("/api/external/ping")
    assert ping.protocol.startswith("HTTP/")
    assert [r.external for r in rows[1:]] == [False, False]
    assert svc.store.closed

def test_prune_endpoint(tmp_path):
    app, _ = _app(tmp_path)
    with TestClient(app) as client:
        assert client.post("/v1/prune").json() == {"pruned": 0}
