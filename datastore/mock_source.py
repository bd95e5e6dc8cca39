from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional
from uuid import uuid4

from app.schemas import ReadingStatus, SensorReading

# Value ranges for generated readings
TEMP_MIN = 15.0
TEMP_SPAN = 20.0
HUMIDITY_MIN = 30
HUMIDITY_SPAN = 50
AQI_MIN = 10
AQI_SPAN = 150
GAS_PPM_MIN = 50
GAS_PPM_SPAN = 200


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MockReadingSource:
    """Reading store stand-in that fabricates plausible readings on demand.

    Nothing is persisted: ``append`` echoes the reading back.
    """

    def __init__(
        self,
        device_id: str = "ESP32_001",
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.device_id = device_id
        self._rng = rng or random.Random()
        self._clock = clock
        self._open = False

    def open(self) -> None:
        self._open = True

    def close(self) -> None:
        self._open = False

    def append(self, reading: SensorReading) -> SensorReading:
        return reading.model_copy(deep=True)

    def latest(self) -> Optional[SensorReading]:
        return self._generate(self._clock())

    def since(self, start: datetime, limit: int) -> List[SensorReading]:
        """One generated reading per hour from ``start`` up to now."""

        now = self._clock()
        hours = max(int((now - start).total_seconds() // 3600), 0)
        readings = [
            self._generate(now - timedelta(hours=hours - index))
            for index in range(hours)
        ]
        return readings[:limit]

    def ping(self) -> bool:
        return self._open

    def _generate(self, timestamp: datetime) -> SensorReading:
        rng = self._rng
        return SensorReading(
            id=uuid4().hex,
            timestamp=timestamp,
            temperature=round(rng.random() * TEMP_SPAN + TEMP_MIN, 1),
            humidity=float(round(rng.random() * HUMIDITY_SPAN + HUMIDITY_MIN)),
            aqi=float(round(rng.random() * AQI_SPAN + AQI_MIN)),
            gas_concentration=float(round(rng.random() * GAS_PPM_SPAN + GAS_PPM_MIN)),
            status=ReadingStatus.online,
            device_id=self.device_id,
        )
