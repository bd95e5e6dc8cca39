from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

from app.schemas import ReadingStatus
from datastore.mock_source import MockReadingSource

NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


def _source() -> MockReadingSource:
    return MockReadingSource(device_id="SIM_1", rng=random.Random(7), clock=lambda: NOW)


def test_latest_generates_plausible_reading() -> None:
    reading = _source().latest()

    assert reading is not None
    assert reading.timestamp == NOW
    assert reading.device_id == "SIM_1"
    assert reading.status is ReadingStatus.online
    assert 15.0 <= reading.temperature <= 35.0
    assert 30 <= reading.humidity <= 80
    assert 10 <= reading.aqi <= 160
    assert 50 <= reading.gas_concentration <= 250


def test_since_generates_one_reading_per_hour_ascending() -> None:
    readings = _source().since(NOW - timedelta(hours=5), limit=100)

    assert len(readings) == 5
    timestamps = [reading.timestamp for reading in readings]
    assert timestamps == sorted(timestamps)
    assert timestamps[0] == NOW - timedelta(hours=5)


def test_since_respects_limit() -> None:
    assert len(_source().since(NOW - timedelta(hours=24), limit=3)) == 3


def test_append_echoes_without_persisting() -> None:
    source = _source()
    reading = source.latest()
    assert reading is not None

    echoed = source.append(reading)

    assert echoed == reading
    assert echoed is not reading


def test_lifecycle_toggles_ping() -> None:
    source = _source()
    assert source.ping() is False
    source.open()
    assert source.ping() is True
    source.close()
    assert source.ping() is False
