"""AQI classification and threshold alerts for a single reading."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from app.schemas import SensorReading


@dataclass(frozen=True)
class AQICategory:
    key: str
    label: str
    color: str
    min: float
    max: float


AQI_CATEGORIES = (
    AQICategory("GOOD", "Good", "green", 0, 50),
    AQICategory("MODERATE", "Moderate", "yellow", 51, 100),
    AQICategory("UNHEALTHY_SENSITIVE", "Unhealthy for Sensitive Groups", "orange", 101, 150),
    AQICategory("UNHEALTHY", "Unhealthy", "red", 151, 200),
    AQICategory("VERY_UNHEALTHY", "Very Unhealthy", "purple", 201, 300),
    AQICategory("HAZARDOUS", "Hazardous", "maroon", 301, 500),
)
HAZARDOUS = AQI_CATEGORIES[-1]

TEMPERATURE_RANGE = (15.0, 35.0)
HUMIDITY_RANGE = (30.0, 70.0)
AQI_SENSITIVE = 100.0
AQI_UNHEALTHY = 150.0
GAS_MAX_PPM = 300.0


def aqi_category(aqi: float) -> AQICategory:
    # Values outside every band, including the gaps between bands, fall through.
    for category in AQI_CATEGORIES:
        if category.min <= aqi <= category.max:
            return category
    return HAZARDOUS


def is_reading_normal(reading: SensorReading) -> bool:
    return (
        TEMPERATURE_RANGE[0] <= reading.temperature <= TEMPERATURE_RANGE[1]
        and HUMIDITY_RANGE[0] <= reading.humidity <= HUMIDITY_RANGE[1]
        and reading.aqi <= AQI_SENSITIVE
        and reading.gas_concentration <= GAS_MAX_PPM
    )


def generate_alerts(reading: SensorReading) -> List[str]:
    alerts: List[str] = []

    if reading.temperature > TEMPERATURE_RANGE[1]:
        alerts.append("High temperature detected")
    elif reading.temperature < TEMPERATURE_RANGE[0]:
        alerts.append("Low temperature detected")

    if reading.humidity > HUMIDITY_RANGE[1]:
        alerts.append("High humidity levels")
    elif reading.humidity < HUMIDITY_RANGE[0]:
        alerts.append("Low humidity levels")

    if reading.aqi > AQI_UNHEALTHY:
        alerts.append("Unhealthy air quality")
    elif reading.aqi > AQI_SENSITIVE:
        alerts.append("Air quality concern for sensitive groups")

    if reading.gas_concentration > GAS_MAX_PPM:
        alerts.append("High gas concentration detected")

    return alerts
