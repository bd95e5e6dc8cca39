from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import List, Optional, Protocol

from pydantic import ValidationError

from app.schemas import SensorReading
from datastore.mock_source import MockReadingSource
from services.errors import StorageFailure
from settings import DATA_SOURCE_MOCK, Settings

logger = logging.getLogger(__name__)


class ReadingStore(Protocol):
    """Append-only collection of readings queried by recency and time range."""

    def open(self) -> None: ...

    def close(self) -> None: ...

    def append(self, reading: SensorReading) -> SensorReading: ...

    def latest(self) -> Optional[SensorReading]: ...

    def since(self, start: datetime, limit: int) -> List[SensorReading]: ...

    def ping(self) -> bool: ...


class JsonReadingStore:
    """Reading collection held in memory and mirrored to a JSON file."""

    def __init__(self, name: str = "sensor_readings", persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self.persistence_path = persistence_path
        self._items: List[SensorReading] = []
        self._lock = Lock()
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        with self._lock:
            if self._open:
                return
            self._items = []
            if self.persistence_path:
                try:
                    self.persistence_path.parent.mkdir(parents=True, exist_ok=True)
                except OSError as exc:
                    raise StorageFailure(f"Cannot prepare store at {self.persistence_path}: {exc}") from exc
                self._load_from_disk()
            self._open = True
        logger.info("Reading store %r opened", self.name, extra={"count": len(self._items)})

    def close(self) -> None:
        with self._lock:
            self._open = False
            self._items = []

    def append(self, reading: SensorReading) -> SensorReading:
        with self._lock:
            self._ensure_open()
            stored = reading.model_copy(deep=True)
            self._items.append(stored)
            try:
                self._persist()
            except OSError as exc:
                self._items.pop()
                raise StorageFailure(f"Failed to write reading {reading.id}: {exc}") from exc
            return stored.model_copy(deep=True)

    def latest(self) -> Optional[SensorReading]:
        with self._lock:
            self._ensure_open()
            if not self._items:
                return None
            newest = max(self._items, key=lambda item: item.timestamp)
            return newest.model_copy(deep=True)

    def since(self, start: datetime, limit: int) -> List[SensorReading]:
        """Return readings at or after ``start``, oldest first, at most ``limit``."""

        with self._lock:
            self._ensure_open()
            matching = [item for item in self._items if item.timestamp >= start]
        matching.sort(key=lambda item: item.timestamp)
        return [item.model_copy(deep=True) for item in matching[:limit]]

    def ping(self) -> bool:
        return self._open

    def _ensure_open(self) -> None:
        if not self._open:
            raise StorageFailure(f"Reading store {self.name!r} is not open.")

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = [item.model_dump(mode="json") for item in self._items]
        # The target file is only ever replaced whole.
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.persistence_path.name}.", suffix=".tmp", dir=self.persistence_path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.persistence_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "[]"
            data = json.loads(raw)
        except OSError as exc:
            raise StorageFailure(f"Cannot read store at {self.persistence_path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            logger.error(
                "Refusing to open corrupt store file %s", self.persistence_path, extra={"reason": "invalid json"}
            )
            raise StorageFailure(f"Store file {self.persistence_path} is not valid JSON: {exc}") from exc

        if not isinstance(data, list):
            raise StorageFailure(f"Store file {self.persistence_path} does not hold a list of readings.")
        try:
            self._items = [SensorReading.model_validate(payload) for payload in data]
        except ValidationError as exc:
            logger.error(
                "Refusing to open store with invalid records %s",
                self.persistence_path,
                extra={"reason": "invalid record"},
            )
            raise StorageFailure(f"Store file {self.persistence_path} holds an invalid reading: {exc}") from exc


def build_reading_store(settings: Settings) -> ReadingStore:
    """Return the store implementation selected by ``settings.data_source``."""
    if settings.data_source == DATA_SOURCE_MOCK:
        return MockReadingSource(device_id=settings.default_device_id)
    path = Path(settings.store_path) if settings.store_path else None
    return JsonReadingStore(persistence_path=path)
