"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class ValidatedPayload:
    """Numeric fields of an ingestion payload after coercion."""

    temperature: float
    humidity: float
    aqi: float
    gas_concentration: float
    device_id: str | None = None


@dataclass(slots=True, frozen=True)
class HourlyBucket:
    """Averages for the readings sharing one local hour-of-day."""

    hour_label: str
    avg_temperature: float
    avg_humidity: int
    avg_aqi: int
    avg_gas_concentration: int
    reading_count: int
