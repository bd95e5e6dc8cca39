from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

import httpx
import typer

from cli.client import ApiClient, describe_error
from cli.config import CLIConfig, load_config
from cli.render import render_current, render_history, render_hourly, render_status


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the air-quality monitoring service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def _reading_time(payload: Dict[str, Any]) -> Optional[datetime]:
    raw = (payload.get("data") or {}).get("timestamp")
    if not isinstance(raw, str):
        return None
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    poll_interval: Optional[float] = typer.Option(
        None,
        "--poll-interval",
        help="Seconds between polls for the watch command.",
    ),
    api_key: Optional[str] = typer.Option(
        None,
        "--api-key",
        help="Shared secret for ingestion (defaults to INGEST_API_KEY env).",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(
        base_url=base_url,
        poll_interval=poll_interval,
        api_key=api_key,
    )
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("current")
def current_command(ctx: typer.Context) -> None:
    """Show the most recent reading with its AQI category and alerts."""
    state = _get_state(ctx)
    payload = state.client.current()
    if payload is None:
        typer.echo("No readings yet. Awaiting first reading.")
        return
    render_current(payload)


@app.command("history")
def history_command(
    ctx: typer.Context,
    hours: int = typer.Option(24, "--hours", min=1, help="Lookback window in hours."),
    limit: int = typer.Option(1000, "--limit", min=1, help="Maximum readings to fetch."),
) -> None:
    """List readings from the last N hours, oldest first."""
    state = _get_state(ctx)
    render_history(state.client.history(hours=hours, limit=limit))


@app.command("hourly")
def hourly_command(
    ctx: typer.Context,
    hours: int = typer.Option(12, "--hours", min=1, help="Lookback window in hours."),
) -> None:
    """Show hour-of-day averages over the last N hours."""
    state = _get_state(ctx)
    render_hourly(state.client.hourly(hours=hours))


@app.command("status")
def status_command(ctx: typer.Context) -> None:
    """Report whether the sensor fleet is online, offline or unknown."""
    state = _get_state(ctx)
    render_status(state.client.status())


@app.command("send")
def send_command(
    ctx: typer.Context,
    temperature: float = typer.Option(..., "--temperature", "-t", help="Temperature in degrees Celsius."),
    humidity: float = typer.Option(..., "--humidity", "-u", help="Relative humidity in percent."),
    aqi: float = typer.Option(..., "--aqi", "-a", help="Air Quality Index."),
    gas: float = typer.Option(..., "--gas", "-g", help="Gas concentration in ppm."),
    device_id: Optional[str] = typer.Option(None, "--device-id", "-d", help="Originating device identifier."),
) -> None:
    """Post a reading to the ingestion endpoint, as a device would."""
    state = _get_state(ctx)
    payload: Dict[str, Any] = {
        "temperature": temperature,
        "humidity": humidity,
        "aqi": aqi,
        "gasConcentration": gas,
    }
    if device_id:
        payload["deviceId"] = device_id
    result = state.client.send_reading(payload)
    typer.secho(
        f"Reading stored. id={result.get('id')} timestamp={result.get('timestamp')}",
        fg=typer.colors.GREEN,
    )


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    interval: Optional[float] = typer.Option(None, "--interval", help="Override the poll interval."),
    count: int = typer.Option(0, "--count", min=0, help="Stop after this many polls (0 = forever)."),
) -> None:
    """Poll the latest reading on a fixed interval.

    Failed polls are reported and retried on the next tick; the last reading
    shown stays the reference for discarding out-of-order responses.
    """
    state = _get_state(ctx)
    delay = interval if interval is not None else state.config.poll_interval
    last_applied: Optional[datetime] = None
    last_shown: Optional[str] = None
    polls = 0
    while count == 0 or polls < count:
        polls += 1
        try:
            payload = state.client.fetch_current()
        except httpx.HTTPError as exc:
            typer.secho(describe_error(exc), fg=typer.colors.RED, err=True)
            if last_shown is None:
                typer.echo("Offline. No reading received yet.")
            else:
                typer.echo(f"Offline, showing last reading from {last_shown}.")
        else:
            if payload is None:
                typer.echo("Awaiting first reading...")
            else:
                taken_at = _reading_time(payload)
                if last_applied is None or (taken_at is not None and taken_at > last_applied):
                    last_applied = taken_at
                    last_shown = (payload.get("data") or {}).get("timestamp")
                    render_current(payload)
                    typer.echo()
        if count and polls >= count:
            break
        time.sleep(delay)
