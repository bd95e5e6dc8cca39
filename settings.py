from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_API_KEY_ENV = "INGEST_API_KEY"
_DATA_SOURCE_ENV = "SENSOR_DATA_SOURCE"
_STORE_PATH_ENV = "READING_STORE_PATH"
_DEVICE_ID_ENV = "DEFAULT_DEVICE_ID"
_STALENESS_ENV = "STALENESS_THRESHOLD_SECONDS"
_TIMEZONE_ENV = "DASHBOARD_TIMEZONE"
_POLL_INTERVAL_ENV = "DASHBOARD_POLL_INTERVAL_SECONDS"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DATA_SOURCE_LIVE = "live"
DATA_SOURCE_MOCK = "mock"
_DATA_SOURCES = {DATA_SOURCE_LIVE, DATA_SOURCE_MOCK}


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str]
    data_source: str
    store_path: Optional[str]
    default_device_id: str
    staleness_threshold_seconds: int
    timezone: Optional[str]
    poll_interval_seconds: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_data_source(default: str) -> str:
    candidate = _read_str_env(_DATA_SOURCE_ENV, default).lower()
    return candidate if candidate in _DATA_SOURCES else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        api_key=_read_optional_env(_API_KEY_ENV, None),
        data_source=_read_data_source(DATA_SOURCE_LIVE),
        store_path=_read_optional_env(_STORE_PATH_ENV, "./tmp/readings.json"),
        default_device_id=_read_str_env(_DEVICE_ID_ENV, "ESP32_001"),
        staleness_threshold_seconds=_read_positive_int(_STALENESS_ENV, 120),
        timezone=_read_optional_env(_TIMEZONE_ENV, None),
        poll_interval_seconds=_read_positive_int(_POLL_INTERVAL_ENV, 5),
        log_level=_read_log_level("INFO"),
    )
