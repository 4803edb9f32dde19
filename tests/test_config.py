from datetime import timedelta
import pytest
from pydantic import ValidationError
from request_analytics.config import Settings

def test_defaults():
    s = Settings()
    assert s.flush_interval_seconds > 0
    assert Settings(retention_days=14).prune_interval_seconds == timedelta(days=7).total_seconds()

@pytest.mark.parametrize("field", ["flush_interval_seconds", "retention_days", "report_days", "queue_capacity_per_cpu"])
@pytest.mark.parametrize("value", [0, -1])
def test_non_positive_values_are_rejected(field, value):
    with pytest.raises(ValidationError):
        Settings(**{field: value})
