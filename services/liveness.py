from __future__ import annotations

from datetime import datetime
from typing import Optional

from app.schemas import LivenessState


def evaluate_liveness(
    last_reading_at: Optional[datetime],
    now: datetime,
    threshold_seconds: float,
) -> LivenessState:
    """Classify the fleet from the age of its most recent reading."""
    if last_reading_at is None:
        return LivenessState.unknown
    elapsed = (now - last_reading_at).total_seconds()
    if elapsed > threshold_seconds:
        return LivenessState.offline
    return LivenessState.online
