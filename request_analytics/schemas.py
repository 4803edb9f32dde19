from __future__ import annotations
from typing import Any, Dict, List
from pydantic import BaseModel, ConfigDict, Field
import orjson

class RequestSource(BaseModel):
    """What the HTTP layer knows about one inbound request."""
    url: str
    path: str
    method: str
    origin: str = ""
    protocol: str = "HTTP/1.1"
    remote_addr: str = ""

class ApiRequest(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str
    method: str = Field(alias="http_method")
    origin: str = ""
    protocol: str = Field(alias="http_protocol")
    caller_id: str = Field(alias="ip_address")
    timestamp: int
    external: bool = False

    def to_json(self) -> bytes:
        return orjson.dumps(self.model_dump(by_alias=True))

    @classmethod
    def from_json(cls, raw: bytes) -> "ApiRequest":
        # orjson.JSONDecodeError and pydantic.ValidationError are both ValueErrors
        return cls.model_validate(orjson.loads(raw))

class ChartData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    dates: List[str]
    unique: str
    total: str
    from_: str = Field(alias="from")
    to: str

    def as_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
