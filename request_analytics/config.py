from __future__ import annotations
import os
from datetime import timedelta
from pydantic import BaseModel, ConfigDict, Field

class Settings(BaseModel):
    # env-derived defaults go through the same bounds checks
    model_config = ConfigDict(validate_default=True)

    db_path: str = os.getenv("ANALYTICS_DB_PATH", "analytics.db")

    flush_interval_seconds: float = Field(float(os.getenv("ANALYTICS_FLUSH_INTERVAL_SECONDS", "30")), gt=0)
    retention_days: int = Field(int(os.getenv("ANALYTICS_RETENTION_DAYS", "14")), gt=0)
    report_days: int = Field(int(os.getenv("ANALYTICS_REPORT_DAYS", "14")), gt=0)

    # Queue capacity is scaled by the number of CPUs at startup.
    queue_capacity_per_cpu: int = Field(int(os.getenv("ANALYTICS_QUEUE_CAPACITY_PER_CPU", str(64 * 1024))), gt=0)

    external_path_marker: str = os.getenv("ANALYTICS_EXTERNAL_MARKER", "/external/")
    log_level: str = os.getenv("ANALYTICS_LOG_LEVEL", "INFO")

    @property
    def retention(self) -> timedelta:
        return timedelta(days=self.retention_days)

    @property
    def prune_interval_seconds(self) -> float:
        return self.retention.total_seconds() / 2

    def queue_capacity(self) -> int:
        return self.queue_capacity_per_cpu * (os.cpu_count() or 1)

settings = Settings()
