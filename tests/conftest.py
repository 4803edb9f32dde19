from datetime import datetime, timezone
import pytest

from request_analytics.schemas import ApiRequest
from request_analytics.store import RequestStore
from request_analytics.windowing import to_ms

NOW = datetime(2026, 2, 7, 15, 30, 0, tzinfo=timezone.utc)

def make_request(ts, caller="10.0.0.1:5000", url="http://api.local/v1/items", external=False):
    if isinstance(ts, datetime):
        ts = to_ms(ts)
    return ApiRequest(
        url=url,
        method="GET",
        origin="https://app.local",
        protocol="HTTP/1.1",
        caller_id=caller,
        timestamp=ts,
        external=external,
    )

@pytest.fixture
def store(tmp_path):
    st = RequestStore(str(tmp_path / "analytics.db"))
    st.open()
    yield st
    st.close()

def put_requests(store, reqs):
    with store.update() as tx:
        tx.put_many(r.to_json() for r in reqs)

def stored_requests(store):
    with store.view() as tx:
        return [ApiRequest.from_json(v) for _, v in tx.items()]
