"""Authentication and payload validation for device ingestion."""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional

from models.records import ValidatedPayload
from services.errors import InvalidType, MissingFields, Unauthorized

logger = logging.getLogger(__name__)

# Payload key -> ValidatedPayload attribute
REQUIRED_FIELDS = {
    "temperature": "temperature",
    "humidity": "humidity",
    "aqi": "aqi",
    "gasConcentration": "gas_concentration",
}


def _coerce_float(value: Any) -> Optional[float]:
    """Parse ``value`` as a finite float, returning ``None`` when it is not one."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        try:
            parsed = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return parsed if math.isfinite(parsed) else None


class IngestionValidator:
    """Checks the shared secret, then field presence, then numeric types.

    Values outside their nominal ranges are accepted unchanged.
    """

    def __init__(self, api_key: Optional[str]) -> None:
        self._api_key = api_key

    def authenticate(self, auth_header: Optional[str]) -> None:
        if self._api_key is None:
            logger.warning("Rejecting ingestion: no API key configured", extra={"reason": "unconfigured"})
            raise Unauthorized("Ingestion API key is not configured on the server.")
        if auth_header != self._api_key:
            logger.warning("Rejecting ingestion: invalid API key", extra={"reason": "bad key"})
            raise Unauthorized("The x-api-key header is missing or does not match.")

    def validate(self, payload: Any, auth_header: Optional[str]) -> ValidatedPayload:
        self.authenticate(auth_header)

        body: Mapping[str, Any] = payload if isinstance(payload, Mapping) else {}
        missing = [name for name in REQUIRED_FIELDS if name not in body]
        if missing:
            logger.info("Rejecting ingestion: missing fields", extra={"missing_fields": missing})
            raise MissingFields(missing)

        values: dict[str, float] = {}
        invalid: list[str] = []
        for name, attribute in REQUIRED_FIELDS.items():
            parsed = _coerce_float(body[name])
            if parsed is None:
                invalid.append(name)
            else:
                values[attribute] = parsed
        if invalid:
            logger.info("Rejecting ingestion: invalid types", extra={"invalid_fields": invalid})
            raise InvalidType(invalid)

        device_id = body.get("deviceId")
        if device_id is not None and not isinstance(device_id, str):
            device_id = str(device_id)
        return ValidatedPayload(device_id=device_id or None, **values)
