from __future__ import annotations

from fastapi import FastAPI

from common.logging_config import setup_logging
from common.settings import CBDSettings, get_settings
from pipelines.cbd_validation import ResultStore

from api.cbd import router as cbd_router


def create_app(settings: CBDSettings | None = None, *, configure_logging: bool = True) -> FastAPI:
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings.log_dir, level=settings.log_level_value)

    app = FastAPI(title="CBD Validator")
    app.state.settings = settings
    app.state.results = ResultStore()
    app.include_router(cbd_router)

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    return app
