from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class TestStatus:
    """Well-known connectivity status values; clients may report others."""

    __test__ = False

    SUCCESS = "success"
    ERROR = "error"


class InstanceSettings(BaseModel):
    """Persisted datasource settings: proxy URL and enabled-service flags."""

    model_config = ConfigDict(populate_by_name=True)

    url: str = "http://localhost:3000/api/datasources/proxy/1"
    json_data: Dict[str, Any] = Field(default_factory=dict, alias="jsonData")

    def is_enabled(self, flag: str) -> bool:
        return self.json_data.get(flag) is True


class TimeRange(BaseModel):
    """Absolute query window."""

    model_config = ConfigDict(populate_by_name=True)

    from_: datetime = Field(..., alias="from")
    to: datetime


class QueryTarget(BaseModel):
    """One panel query; per-service settings live under the service key."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    service: str
    ref_id: Optional[str] = Field(default=None, alias="refId")
    namespace: Optional[str] = None

    def service_options(self) -> Dict[str, Any]:
        """Return the block of per-service fields, e.g. ``target["cvm"]``."""

        extra = self.model_extra or {}
        block = extra.get(self.service)
        return block if isinstance(block, dict) else {}


class QueryRequest(BaseModel):
    """Panel query request: targets plus parameters shared by every target."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    targets: List[QueryTarget] = Field(default_factory=list)
    range: Optional[TimeRange] = None
    interval: Optional[str] = None
    interval_ms: Optional[int] = Field(default=None, alias="intervalMs")
    max_data_points: Optional[int] = Field(default=None, alias="maxDataPoints")
    timezone: Optional[str] = None


class TimeSeries(BaseModel):
    """Normalized series; datapoints are ``[value, timestamp_ms]`` pairs."""

    target: str
    datapoints: List[Tuple[Optional[float], int]] = Field(default_factory=list)


class QueryResponse(BaseModel):
    data: List[TimeSeries] = Field(default_factory=list)


class TestResult(BaseModel):
    """Connectivity status as reported by a client or aggregated across clients."""

    __test__ = False  # not a pytest test class

    status: str
    message: str = ""
    title: Optional[str] = None


class MetricFindValue(BaseModel):
    """Selectable item for template variables."""

    text: str
    value: Any = None
