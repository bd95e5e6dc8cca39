"""Hourly aggregation of sensor readings for charting."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import tzinfo
from typing import Dict, Iterable, List, Optional

from app.schemas import SensorReading
from models.records import HourlyBucket


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves towards positive infinity, like the dashboard's JavaScript."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


@dataclass
class _Totals:
    count: int = 0
    temperature: float = 0.0
    humidity: float = 0.0
    aqi: float = 0.0
    gas_concentration: float = 0.0


class Aggregator:
    """Buckets readings by local hour-of-day and averages each bucket.

    Readings from different days that share an hour land in the same bucket.
    Temperature keeps one decimal; humidity, AQI and gas are whole numbers.
    """

    def __init__(self, tz: Optional[tzinfo] = None) -> None:
        self.tz = tz

    def hour_label(self, reading: SensorReading) -> str:
        return f"{reading.timestamp.astimezone(self.tz).hour:02d}"

    def aggregate(self, readings: Iterable[SensorReading]) -> List[HourlyBucket]:
        groups: Dict[str, _Totals] = {}

        for reading in readings:
            totals = groups.setdefault(self.hour_label(reading), _Totals())
            totals.count += 1
            totals.temperature += reading.temperature
            totals.humidity += reading.humidity
            totals.aqi += reading.aqi
            totals.gas_concentration += reading.gas_concentration

        buckets = [
            HourlyBucket(
                hour_label=label,
                avg_temperature=round_half_up(totals.temperature / totals.count, 1),
                avg_humidity=int(round_half_up(totals.humidity / totals.count)),
                avg_aqi=int(round_half_up(totals.aqi / totals.count)),
                avg_gas_concentration=int(round_half_up(totals.gas_concentration / totals.count)),
                reading_count=totals.count,
            )
            for label, totals in groups.items()
        ]
        buckets.sort(key=lambda bucket: bucket.hour_label)
        return buckets
