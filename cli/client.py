from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import typer

from cli.config import CLIConfig


def describe_error(exc: httpx.HTTPError) -> str:
    """One-line description of a failed request for terminal output."""
    if isinstance(exc, httpx.HTTPStatusError):
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("message") or data.get("error")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        return f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
    return f"Could not reach the service: {exc}"


class ApiClient:
    """Minimal HTTP client for the monitoring service."""

    def __init__(self, config: CLIConfig, transport: Optional[httpx.BaseTransport] = None) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=30.0, transport=transport)

    def close(self) -> None:
        self._client.close()

    def fetch_current(self) -> Optional[Dict[str, Any]]:
        """Return the ``/current`` body, or ``None`` while no reading exists.

        Raises ``httpx.HTTPError`` on transport failures and non-404 error statuses.
        """
        response = self._client.get("/current")
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()

    def current(self) -> Optional[Dict[str, Any]]:
        try:
            return self.fetch_current()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            self._handle_transport_error(exc)
        return None

    def history(self, hours: int, limit: int) -> Dict[str, Any]:
        return self._get_json("/historical", params={"hours": hours, "limit": limit})

    def hourly(self, hours: int) -> List[Dict[str, Any]]:
        return self._get_json("/hourly", params={"hours": hours}).get("data") or []

    def status(self) -> Dict[str, Any]:
        return self._get_json("/status").get("data") or {}

    def send_reading(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self._config.api_key:
            raise typer.BadParameter("An API key is required; pass --api-key or set INGEST_API_KEY.")
        try:
            response = self._client.post(
                "/ingest",
                json=payload,
                headers={"x-api-key": self._config.api_key},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            self._handle_transport_error(exc)
        return response.json()

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            self._handle_transport_error(exc)
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        typer.secho(describe_error(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    @staticmethod
    def _handle_transport_error(exc: httpx.TransportError) -> None:
        typer.secho(describe_error(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
