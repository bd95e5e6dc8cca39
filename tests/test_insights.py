from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.schemas import SensorReading
from services.insights import aqi_category, generate_alerts, is_reading_normal


def _reading(temperature=22.0, humidity=50.0, aqi=40.0, gas=150.0) -> SensorReading:
    return SensorReading(
        id="r",
        timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
        temperature=temperature,
        humidity=humidity,
        aqi=aqi,
        gas_concentration=gas,
        device_id="ESP32_001",
    )


@pytest.mark.parametrize(
    ("aqi", "key"),
    [
        (0, "GOOD"),
        (42, "GOOD"),
        (51, "MODERATE"),
        (150, "UNHEALTHY_SENSITIVE"),
        (200, "UNHEALTHY"),
        (250, "VERY_UNHEALTHY"),
        (450, "HAZARDOUS"),
        (9999, "HAZARDOUS"),
        (50.5, "HAZARDOUS"),
    ],
)
def test_aqi_category(aqi, key) -> None:
    assert aqi_category(aqi).key == key


def test_normal_reading_has_no_alerts() -> None:
    reading = _reading()

    assert is_reading_normal(reading) is True
    assert generate_alerts(reading) == []


def test_alerts_for_every_threshold() -> None:
    reading = _reading(temperature=36.0, humidity=20.0, aqi=120.0, gas=301.0)

    assert generate_alerts(reading) == [
        "High temperature detected",
        "Low humidity levels",
        "Air quality concern for sensitive groups",
        "High gas concentration detected",
    ]
    assert is_reading_normal(reading) is False


def test_alerts_for_opposite_extremes() -> None:
    reading = _reading(temperature=10.0, humidity=75.0, aqi=151.0)

    assert generate_alerts(reading) == [
        "Low temperature detected",
        "High humidity levels",
        "Unhealthy air quality",
    ]
