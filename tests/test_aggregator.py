"""Unit tests for the hourly aggregation logic."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.schemas import SensorReading
from services.aggregator import Aggregator, round_half_up


def _reading(
    hour: int,
    temperature: float,
    humidity: float,
    aqi: float,
    gas: float = 100.0,
    day: int = 1,
    minute: int = 0,
) -> SensorReading:
    """Helper to build deterministic sensor readings."""

    return SensorReading(
        id=f"r-{day}-{hour}-{minute}",
        timestamp=datetime(2024, 1, day, hour, minute, tzinfo=timezone.utc),
        temperature=temperature,
        humidity=humidity,
        aqi=aqi,
        gas_concentration=gas,
        device_id="ESP32_001",
    )


def test_aggregate_empty_iterable_returns_no_buckets() -> None:
    assert Aggregator(tz=timezone.utc).aggregate([]) == []


def test_aggregate_single_hour_averages() -> None:
    aggregator = Aggregator(tz=timezone.utc)
    readings = [
        _reading(10, 20.0, 40, 50),
        _reading(10, 22.0, 44, 60, minute=30),
    ]

    buckets = aggregator.aggregate(readings)

    assert len(buckets) == 1
    bucket = buckets[0]
    assert bucket.hour_label == "10"
    assert bucket.avg_temperature == 21.0
    assert bucket.avg_humidity == 42
    assert bucket.avg_aqi == 55
    assert bucket.reading_count == 2


def test_aggregate_sorts_by_hour_label() -> None:
    aggregator = Aggregator(tz=timezone.utc)
    readings = [
        _reading(14, 20.0, 40, 50),
        _reading(2, 20.0, 40, 50),
        _reading(9, 20.0, 40, 50),
    ]

    labels = [bucket.hour_label for bucket in aggregator.aggregate(readings)]

    assert labels == ["02", "09", "14"]


def test_aggregate_merges_same_hour_across_days() -> None:
    aggregator = Aggregator(tz=timezone.utc)
    readings = [
        _reading(3, 10.0, 30, 20, day=1),
        _reading(3, 12.0, 34, 40, day=2),
    ]

    buckets = aggregator.aggregate(readings)

    assert [bucket.hour_label for bucket in buckets] == ["03"]
    assert buckets[0].reading_count == 2
    assert buckets[0].avg_temperature == 11.0


def test_rounding_is_half_up_and_asymmetric() -> None:
    aggregator = Aggregator(tz=timezone.utc)
    readings = [
        _reading(5, 20.0, 42, 54, gas=101),
        _reading(5, 20.25, 43, 55, gas=102),
    ]

    bucket = aggregator.aggregate(readings)[0]

    # 20.125 -> 20.1, 42.5 -> 43, 54.5 -> 55, 101.5 -> 102
    assert bucket.avg_temperature == 20.1
    assert bucket.avg_humidity == 43
    assert bucket.avg_aqi == 55
    assert bucket.avg_gas_concentration == 102
    assert isinstance(bucket.avg_humidity, int)


def test_hour_label_uses_configured_timezone() -> None:
    aggregator = Aggregator(tz=timezone(timedelta(hours=9)))

    buckets = aggregator.aggregate([_reading(23, 20.0, 40, 50)])

    assert buckets[0].hour_label == "08"


def test_round_half_up_matches_expected_values() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(-2.5) == -2
    assert round_half_up(21.04, 1) == 21.0
