"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from app.schemas import (
    CurrentResponse,
    ErrorResponse,
    HistoricalMeta,
    HistoricalResponse,
    HourlyBucketOut,
    HourlyMeta,
    HourlyResponse,
    IngestResponse,
    Insights,
    LivenessReport,
    ReadingMetadata,
    StatusResponse,
)
from services.errors import (
    InvalidType,
    MissingFields,
    NotFound,
    StorageFailure,
    TelemetryError,
    Unauthorized,
)
from services.insights import aqi_category, generate_alerts, is_reading_normal
from services.sensor_service import (
    DEFAULT_HISTORY_HOURS,
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_HOURLY_HOURS,
    SensorDataService,
    parse_positive_int,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_STATUS = {
    Unauthorized: status.HTTP_401_UNAUTHORIZED,
    MissingFields: status.HTTP_400_BAD_REQUEST,
    InvalidType: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    StorageFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_service(request: Request) -> SensorDataService:
    return request.app.state.service


def error_response(status_code: int, error: str, message: str, fields: Optional[list[str]] = None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, fields=fields)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _telemetry_error_response(exc: TelemetryError) -> JSONResponse:
    status_code = _ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return error_response(status_code, exc.error, exc.message, getattr(exc, "fields", None))


def _unexpected_error_response(exc: Exception, error: str) -> JSONResponse:
    logger.exception("Unhandled error while serving request", extra={"reason": type(exc).__name__})
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, error, str(exc) or type(exc).__name__)


def _client_metadata(request: Request) -> ReadingMetadata:
    forwarded = request.headers.get("x-forwarded-for")
    ip_address = (
        (forwarded.split(",")[0].strip() if forwarded else None)
        or request.headers.get("x-real-ip")
        or (request.client.host if request.client else None)
        or "unknown"
    )
    user_agent = request.headers.get("user-agent") or "unknown"
    return ReadingMetadata(ip_address=ip_address, user_agent=user_agent)


@router.post(
    "/ingest",
    response_model=IngestResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Store a reading posted by a sensor device.",
)
async def ingest_reading(
    request: Request,
    x_api_key: Optional[str] = Header(default=None),
    service: SensorDataService = Depends(get_service),
):
    try:
        service.validator.authenticate(x_api_key)
    except TelemetryError as exc:
        return _telemetry_error_response(exc)

    try:
        payload = await request.json()
    except ValueError as exc:
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to store data",
            f"Request body is not valid JSON: {exc}",
        )

    try:
        reading = await run_in_threadpool(
            service.ingest, payload, x_api_key, metadata=_client_metadata(request)
        )
    except TelemetryError as exc:
        return _telemetry_error_response(exc)
    except Exception as exc:  # noqa: BLE001
        return _unexpected_error_response(exc, "Failed to store data")
    return IngestResponse(id=reading.id, timestamp=reading.timestamp)


@router.get(
    "/current",
    response_model=CurrentResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Fetch the most recent reading.",
)
def current_reading(service: SensorDataService = Depends(get_service)):
    try:
        reading = service.latest()
    except TelemetryError as exc:
        return _telemetry_error_response(exc)
    except Exception as exc:  # noqa: BLE001
        return _unexpected_error_response(exc, "Failed to fetch data")
    insights = Insights(
        aqi_category=aqi_category(reading.aqi).key,
        alerts=generate_alerts(reading),
        normal=is_reading_normal(reading),
    )
    return CurrentResponse(data=reading.public(), insights=insights)


@router.get(
    "/historical",
    response_model=HistoricalResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Fetch readings from the last N hours, oldest first.",
)
def historical_readings(
    hours: Optional[str] = Query(default=None, description="Lookback window in hours."),
    limit: Optional[str] = Query(default=None, description="Maximum number of readings."),
    service: SensorDataService = Depends(get_service),
):
    window_hours = parse_positive_int(hours, DEFAULT_HISTORY_HOURS)
    row_limit = parse_positive_int(limit, DEFAULT_HISTORY_LIMIT)
    try:
        window = service.history(window_hours, row_limit)
    except TelemetryError as exc:
        return _telemetry_error_response(exc)
    except Exception as exc:  # noqa: BLE001
        return _unexpected_error_response(exc, "Failed to fetch historical data")
    count = len(window.readings)
    return HistoricalResponse(
        data=[reading.public() for reading in window.readings],
        meta=HistoricalMeta(
            count=count,
            hours=window.hours,
            start_time=window.start_time,
            end_time=window.end_time,
        ),
        message=f"Retrieved {count} sensor readings from the last {window.hours} hours",
    )


@router.get(
    "/hourly",
    response_model=HourlyResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Hour-of-day averages over the last N hours.",
)
def hourly_averages(
    hours: Optional[str] = Query(default=None, description="Lookback window in hours."),
    service: SensorDataService = Depends(get_service),
):
    window_hours = parse_positive_int(hours, DEFAULT_HOURLY_HOURS)
    try:
        buckets = service.hourly(window_hours)
    except TelemetryError as exc:
        return _telemetry_error_response(exc)
    except Exception as exc:  # noqa: BLE001
        return _unexpected_error_response(exc, "Failed to fetch hourly data")
    return HourlyResponse(
        data=[
            HourlyBucketOut(
                hour_label=bucket.hour_label,
                avg_temperature=bucket.avg_temperature,
                avg_humidity=bucket.avg_humidity,
                avg_aqi=bucket.avg_aqi,
                avg_gas_concentration=bucket.avg_gas_concentration,
                reading_count=bucket.reading_count,
            )
            for bucket in buckets
        ],
        meta=HourlyMeta(count=len(buckets), hours=window_hours),
    )


@router.get(
    "/status",
    response_model=StatusResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Online/offline state derived from the latest reading.",
)
def fleet_status(service: SensorDataService = Depends(get_service)):
    try:
        snapshot = service.liveness()
    except TelemetryError as exc:
        return _telemetry_error_response(exc)
    except Exception as exc:  # noqa: BLE001
        return _unexpected_error_response(exc, "Failed to evaluate status")
    return StatusResponse(
        data=LivenessReport(
            state=snapshot.state,
            last_reading_at=snapshot.last_reading_at,
            threshold_seconds=snapshot.threshold_seconds,
            checked_at=snapshot.checked_at,
        )
    )


@router.get(
    "/health",
    summary="Health check endpoint including store connectivity.",
    status_code=status.HTTP_200_OK,
)
def healthcheck(service: SensorDataService = Depends(get_service)):
    if not service.healthy():
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            StorageFailure.error,
            "Reading store is not reachable.",
        )
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
