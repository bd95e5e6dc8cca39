"""Unit tests for the JSON-backed reading store and the store factory."""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from app.schemas import ReadingMetadata, SensorReading
from datastore.mock_source import MockReadingSource
from datastore.reading_store import JsonReadingStore, build_reading_store
from services.errors import StorageFailure
from settings import Settings

BASE = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def _reading(reading_id: str, minutes: int = 0, aqi: float = 42.0) -> SensorReading:
    return SensorReading(
        id=reading_id,
        timestamp=BASE + timedelta(minutes=minutes),
        temperature=21.3,
        humidity=45.0,
        aqi=aqi,
        gas_concentration=130.7,
        device_id="ESP32_001",
        metadata=ReadingMetadata(ip_address="10.0.0.5", user_agent="ESP32"),
    )


@pytest.fixture()
def store() -> JsonReadingStore:
    store = JsonReadingStore()
    store.open()
    yield store
    store.close()


def _settings(**overrides) -> Settings:
    defaults = dict(
        api_key="key",
        data_source="live",
        store_path=None,
        default_device_id="ESP32_001",
        staleness_threshold_seconds=120,
        timezone=None,
        poll_interval_seconds=5,
        log_level="INFO",
    )
    return replace(Settings(**defaults), **overrides)


def test_latest_returns_newest_by_timestamp(store: JsonReadingStore) -> None:
    store.append(_reading("late", minutes=10))
    store.append(_reading("early", minutes=0))

    latest = store.latest()

    assert latest is not None
    assert latest.id == "late"


def test_latest_on_empty_store_is_none(store: JsonReadingStore) -> None:
    assert store.latest() is None


def test_reads_return_deep_copies(store: JsonReadingStore) -> None:
    store.append(_reading("r1"))

    fetched = store.latest()
    assert fetched is not None
    fetched.metadata.ip_address = "tampered"

    again = store.latest()
    assert again is not None
    assert again.metadata.ip_address == "10.0.0.5"


def test_since_filters_sorts_and_limits(store: JsonReadingStore) -> None:
    for minutes in (30, -90, 10, 20, -5):
        store.append(_reading(f"m{minutes}", minutes=minutes))

    window = store.since(BASE - timedelta(minutes=5), limit=10)
    assert [item.id for item in window] == ["m-5", "m10", "m20", "m30"]

    limited = store.since(BASE - timedelta(minutes=5), limit=2)
    assert [item.id for item in limited] == ["m-5", "m10"]


def test_since_includes_reading_at_start(store: JsonReadingStore) -> None:
    store.append(_reading("edge"))

    assert [item.id for item in store.since(BASE, limit=5)] == ["edge"]


def test_append_persists_to_disk_and_reloads(tmp_path) -> None:
    path = tmp_path / "readings.json"
    store = JsonReadingStore(persistence_path=path)
    store.open()
    original = _reading("persisted")

    store.append(original)
    store.close()

    payload = json.loads(path.read_text())
    assert [item["id"] for item in payload] == ["persisted"]

    reloaded = JsonReadingStore(persistence_path=path)
    reloaded.open()
    assert reloaded.latest() == original


def test_corrupt_file_is_refused_and_left_untouched(tmp_path) -> None:
    path = tmp_path / "readings.json"
    writer = JsonReadingStore(persistence_path=path)
    writer.open()
    for index in range(3):
        writer.append(_reading(f"r{index}", minutes=index))
    writer.close()
    truncated = path.read_text()[:-40]
    path.write_text(truncated)

    store = JsonReadingStore(persistence_path=path)
    with pytest.raises(StorageFailure):
        store.open()

    assert store.is_open is False
    assert path.read_text() == truncated
    with pytest.raises(StorageFailure):
        store.append(_reading("new"))
    assert path.read_text() == truncated


@pytest.mark.parametrize(
    "content",
    [
        '{"id": "not-a-list"}',
        '[{"id": "r1", "timestamp": "2024-01-01T00:00:00Z"}]',
    ],
)
def test_file_with_unexpected_content_is_refused(tmp_path, content: str) -> None:
    path = tmp_path / "readings.json"
    path.write_text(content)
    store = JsonReadingStore(persistence_path=path)

    with pytest.raises(StorageFailure):
        store.open()

    assert path.read_text() == content


def test_empty_file_opens_as_empty_store(tmp_path) -> None:
    path = tmp_path / "readings.json"
    path.write_text("")
    store = JsonReadingStore(persistence_path=path)

    store.open()

    assert store.latest() is None


def test_append_leaves_no_temporary_files(tmp_path) -> None:
    path = tmp_path / "readings.json"
    store = JsonReadingStore(persistence_path=path)
    store.open()

    store.append(_reading("r1"))
    store.append(_reading("r2", minutes=1))

    assert sorted(entry.name for entry in tmp_path.iterdir()) == ["readings.json"]


def test_operations_on_closed_store_raise_storage_failure() -> None:
    store = JsonReadingStore()

    with pytest.raises(StorageFailure):
        store.latest()
    with pytest.raises(StorageFailure):
        store.append(_reading("nope"))
    assert store.ping() is False


def test_failed_write_is_not_kept(tmp_path) -> None:
    path = tmp_path / "readings.json"
    store = JsonReadingStore(persistence_path=path)
    store.open()
    path.mkdir()

    with pytest.raises(StorageFailure):
        store.append(_reading("lost"))

    assert store.latest() is None
    assert [entry.name for entry in tmp_path.iterdir()] == ["readings.json"]


def test_factory_selects_live_store(tmp_path) -> None:
    store = build_reading_store(_settings(store_path=str(tmp_path / "db.json")))

    assert isinstance(store, JsonReadingStore)
    assert store.persistence_path == tmp_path / "db.json"


def test_factory_selects_mock_source() -> None:
    store = build_reading_store(_settings(data_source="mock", default_device_id="SIM_9"))

    assert isinstance(store, MockReadingSource)
    assert store.device_id == "SIM_9"
