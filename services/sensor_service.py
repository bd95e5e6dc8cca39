"""Ingestion and query orchestration over an injected reading store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Optional
from uuid import uuid4
from zoneinfo import ZoneInfo

from app.schemas import LivenessState, ReadingMetadata, ReadingStatus, SensorReading
from datastore.reading_store import ReadingStore
from models.records import HourlyBucket
from services.aggregator import Aggregator
from services.errors import NotFound
from services.liveness import evaluate_liveness
from services.validator import IngestionValidator
from settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_HOURS = 24
DEFAULT_HISTORY_LIMIT = 1000
DEFAULT_HOURLY_HOURS = 12


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_positive_int(value: Any, default: int) -> int:
    """Interpret a query parameter, falling back to ``default`` when unusable."""
    if value is None:
        return default
    candidate = str(value).strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


@dataclass(frozen=True)
class HistoryWindow:
    readings: List[SensorReading]
    hours: int
    start_time: datetime
    end_time: datetime


@dataclass(frozen=True)
class LivenessSnapshot:
    state: LivenessState
    last_reading_at: Optional[datetime]
    threshold_seconds: int
    checked_at: datetime


class SensorDataService:
    """Coordinates validation, storage writes and read-side queries."""

    def __init__(
        self,
        store: ReadingStore,
        validator: IngestionValidator,
        aggregator: Aggregator,
        default_device_id: str = "ESP32_001",
        staleness_threshold_seconds: int = 120,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.validator = validator
        self.aggregator = aggregator
        self.default_device_id = default_device_id
        self.staleness_threshold_seconds = staleness_threshold_seconds
        self._clock = clock

    def open(self) -> None:
        self.store.open()

    def close(self) -> None:
        self.store.close()

    def ingest(
        self,
        payload: Any,
        auth_header: Optional[str],
        metadata: Optional[ReadingMetadata] = None,
    ) -> SensorReading:
        """Validate a device payload and append it to the store."""
        validated = self.validator.validate(payload, auth_header)
        reading = SensorReading(
            id=uuid4().hex,
            timestamp=self._clock(),
            temperature=validated.temperature,
            humidity=validated.humidity,
            aqi=validated.aqi,
            gas_concentration=validated.gas_concentration,
            status=ReadingStatus.online,
            device_id=validated.device_id or self.default_device_id,
            metadata=metadata or ReadingMetadata(),
        )
        stored = self.store.append(reading)
        logger.info(
            "Stored sensor reading",
            extra={
                "reading_id": stored.id,
                "device_id": stored.device_id,
                "client_ip": stored.metadata.ip_address,
            },
        )
        return stored

    def latest(self) -> SensorReading:
        reading = self.store.latest()
        if reading is None:
            raise NotFound("No sensor readings found in database")
        return reading

    def history(
        self,
        hours: int = DEFAULT_HISTORY_HOURS,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> HistoryWindow:
        end_time = self._clock()
        start_time = end_time - timedelta(hours=hours)
        readings = self.store.since(start_time, limit)
        logger.debug("Fetched history window", extra={"hours": hours, "count": len(readings)})
        return HistoryWindow(
            readings=readings,
            hours=hours,
            start_time=start_time,
            end_time=end_time,
        )

    def hourly(
        self,
        hours: int = DEFAULT_HOURLY_HOURS,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> List[HourlyBucket]:
        return self.aggregator.aggregate(self.history(hours, limit).readings)

    def liveness(self) -> LivenessSnapshot:
        latest = self.store.latest()
        last_reading_at = latest.timestamp if latest is not None else None
        now = self._clock()
        state = evaluate_liveness(last_reading_at, now, self.staleness_threshold_seconds)
        return LivenessSnapshot(
            state=state,
            last_reading_at=last_reading_at,
            threshold_seconds=self.staleness_threshold_seconds,
            checked_at=now,
        )

    def healthy(self) -> bool:
        return self.store.ping()


def build_service(settings: Settings, store: ReadingStore) -> SensorDataService:
    """Wire a service from settings around an already constructed store."""
    tz = ZoneInfo(settings.timezone) if settings.timezone else None
    return SensorDataService(
        store=store,
        validator=IngestionValidator(api_key=settings.api_key),
        aggregator=Aggregator(tz=tz),
        default_device_id=settings.default_device_id,
        staleness_threshold_seconds=settings.staleness_threshold_seconds,
    )
