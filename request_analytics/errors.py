from __future__ import annotations

class AnalyticsError(Exception):
    pass

class StoreError(AnalyticsError):
    """A transaction against the request store failed."""

class StoreInitError(StoreError):
    """The store file could not be opened or the schema could not be created."""

class StoreClosedError(StoreError):
    pass

class ReportError(AnalyticsError):
    """The daily report could not be produced."""
