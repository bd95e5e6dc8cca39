from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_reading(reading: Dict[str, Any]) -> None:
    echo_key_values(
        [
            ("timestamp", reading.get("timestamp")),
            ("device_id", reading.get("deviceId")),
            ("temperature", reading.get("temperature")),
            ("humidity", reading.get("humidity")),
            ("aqi", reading.get("aqi")),
            ("gas_concentration", reading.get("gasConcentration")),
        ]
    )


def render_current(payload: Dict[str, Any]) -> None:
    echo_heading("Current Reading")
    render_reading(payload.get("data") or {})

    insights = payload.get("insights") or {}
    typer.echo(f"aqi_category: {insights.get('aqiCategory')}")
    alerts = insights.get("alerts") or []
    typer.echo()
    echo_heading("Alerts")
    if alerts:
        for alert in alerts:
            typer.secho(f"  - {alert}", fg=typer.colors.YELLOW)
    else:
        typer.echo("No alerts.")


def render_history(payload: Dict[str, Any]) -> None:
    meta = payload.get("meta") or {}
    echo_heading(f"Readings from the last {meta.get('hours')} hours ({meta.get('count')})")
    readings = payload.get("data") or []
    if not readings:
        typer.echo("No readings in this window.")
        return
    for reading in readings:
        typer.echo(
            f"  {reading.get('timestamp')}  temp={reading.get('temperature')}  "
            f"hum={reading.get('humidity')}  aqi={reading.get('aqi')}  "
            f"gas={reading.get('gasConcentration')}"
        )


def render_hourly(buckets: List[Dict[str, Any]]) -> None:
    echo_heading("Hourly Averages")
    if not buckets:
        typer.echo("No readings in this window.")
        return
    typer.echo("hour  temp  humidity  aqi  readings")
    for bucket in buckets:
        typer.echo(
            f"{bucket.get('hourLabel'):>4}  {bucket.get('avgTemperature'):>4}  "
            f"{bucket.get('avgHumidity'):>8}  {bucket.get('avgAQI'):>3}  {bucket.get('readingCount'):>8}"
        )


def render_status(report: Dict[str, Any]) -> None:
    state = report.get("state")
    colour = {
        "online": typer.colors.GREEN,
        "offline": typer.colors.RED,
    }.get(state, typer.colors.WHITE)
    typer.secho(f"state: {state}", fg=colour, bold=True)
    echo_key_values(
        [
            ("last_reading_at", report.get("lastReadingAt")),
            ("threshold_seconds", report.get("thresholdSeconds")),
            ("checked_at", report.get("checkedAt")),
        ]
    )
