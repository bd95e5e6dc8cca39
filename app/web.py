from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.schemas import LivenessState
from services.insights import AQI_CATEGORIES


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(request: Request) -> HTMLResponse:
    settings = request.app.state.settings
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "poll_interval_ms": settings.poll_interval_seconds * 1000,
            "hourly_hours": 12,
            "categories": AQI_CATEGORIES,
            "initial_state": LivenessState.unknown.value,
        },
    )
