from __future__ import annotations
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.api import router
from app.web import router as web_router
from datastore.reading_store import ReadingStore, build_reading_store
from logging_config import configure_logging
from services.sensor_service import build_service
from settings import Settings, get_settings


def create_app(settings: Optional[Settings] = None, store: Optional[ReadingStore] = None) -> FastAPI:
    """Build the application; ``store`` overrides the one selected by settings."""
    configure_logging()
    resolved = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        reading_store = store if store is not None else build_reading_store(resolved)
        service = build_service(resolved, reading_store)
        service.open()
        app.state.service = service
        try:
            yield
        finally:
            service.close()

    app = FastAPI(
        title="Air Quality Monitor",
        description="Ingests air-quality telemetry from sensor devices and serves it to a polling dashboard.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = resolved
    static_dir = Path(__file__).resolve().parent.parent / "static"
    app.mount("/static", StaticFiles(directory=static_dir), name="static")
    app.include_router(router)
    app.include_router(web_router)
    return app

app = create_app()
