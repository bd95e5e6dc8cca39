from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.schemas import LivenessState
from services.liveness import evaluate_liveness

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_no_reading_is_unknown() -> None:
    assert evaluate_liveness(None, NOW, 120) is LivenessState.unknown


def test_recent_reading_is_online() -> None:
    assert evaluate_liveness(NOW - timedelta(seconds=60), NOW, 120) is LivenessState.online


def test_stale_reading_is_offline() -> None:
    assert evaluate_liveness(NOW - timedelta(seconds=180), NOW, 120) is LivenessState.offline


def test_reading_exactly_at_threshold_is_online() -> None:
    assert evaluate_liveness(NOW - timedelta(seconds=120), NOW, 120) is LivenessState.online
