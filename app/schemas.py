"""Pydantic schemas for persisted readings and the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys, populated by either name."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReadingStatus(str, Enum):
    """Device status recorded alongside each reading."""

    online = "online"
    offline = "offline"


class LivenessState(str, Enum):
    """Fleet status derived from the age of the most recent reading."""

    online = "online"
    offline = "offline"
    unknown = "unknown"


class ReadingMetadata(CamelModel):
    """Best-effort network diagnostics captured at ingestion."""

    ip_address: str = "unknown"
    user_agent: str = "unknown"


class PublicReading(CamelModel):
    """Reading fields exposed by the read endpoints."""

    id: str
    timestamp: datetime
    temperature: float
    humidity: float
    aqi: float
    gas_concentration: float
    status: ReadingStatus = ReadingStatus.online
    device_id: str


class SensorReading(PublicReading):
    """A single persisted sample; adds ingestion diagnostics to the public fields."""

    metadata: ReadingMetadata = Field(default_factory=ReadingMetadata)

    def public(self) -> PublicReading:
        return PublicReading.model_validate(self.model_dump(exclude={"metadata"}))


class HourlyBucketOut(CamelModel):
    hour_label: str
    avg_temperature: float
    avg_humidity: int
    avg_aqi: int = Field(alias="avgAQI")
    avg_gas_concentration: int
    reading_count: int = Field(..., ge=1)


class Insights(CamelModel):
    aqi_category: str
    alerts: List[str] = Field(default_factory=list)
    normal: bool


class IngestResponse(CamelModel):
    success: bool = True
    message: str = "Sensor data stored successfully"
    id: str
    timestamp: datetime


class CurrentResponse(CamelModel):
    success: bool = True
    data: PublicReading
    insights: Insights
    message: str = "Latest sensor data retrieved successfully"


class HistoricalMeta(CamelModel):
    count: int = Field(..., ge=0)
    hours: int
    start_time: datetime
    end_time: datetime


class HistoricalResponse(CamelModel):
    success: bool = True
    data: List[PublicReading] = Field(default_factory=list)
    meta: HistoricalMeta
    message: str


class HourlyMeta(CamelModel):
    count: int = Field(..., ge=0)
    hours: int


class HourlyResponse(CamelModel):
    success: bool = True
    data: List[HourlyBucketOut] = Field(default_factory=list)
    meta: HourlyMeta


class LivenessReport(CamelModel):
    state: LivenessState
    last_reading_at: Optional[datetime] = None
    threshold_seconds: int
    checked_at: datetime


class StatusResponse(CamelModel):
    success: bool = True
    data: LivenessReport


class ErrorResponse(BaseModel):
    """Envelope returned by every endpoint on failure."""

    success: bool = False
    error: str
    message: str
    fields: Optional[List[str]] = None
