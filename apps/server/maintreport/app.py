"""Runtime wiring for store -> interchange/rendering -> HTTP API.

Boundary note for maintainers:
- Keep this module focused on wiring, not pipeline details.
- Spreadsheet rules belong in ``spreadsheet/*``; layout in ``report/*``.
- API schemas belong in ``api_models.py``.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path

import uvicorn
from fastapi import FastAPI

from . import __version__
from .advice import AdviceService
from .api import create_router
from .config import AppConfig, load_config
from .record_store import ReportStore
from .report.fonts import GlyphAssetCache

LOGGER = logging.getLogger(__name__)


@dataclass
class RuntimeState:
    config: AppConfig
    store: ReportStore
    font_cache: GlyphAssetCache
    advice: AdviceService


def build_runtime(config: AppConfig) -> RuntimeState:
    return RuntimeState(
        config=config,
        store=ReportStore(config.storage.reports_json_path),
        # One cache per process run; populated lazily on the first PDF request.
        font_cache=GlyphAssetCache(config.fonts.sources, timeout_s=config.fonts.timeout_s),
        advice=AdviceService(config.advice),
    )


def create_app(config_path: Path | None = None, *, runtime: RuntimeState | None = None) -> FastAPI:
    state = runtime or build_runtime(load_config(config_path))
    app = FastAPI(title="NPK SOP Maintenance Reports", version=__version__)
    app.state.runtime = state
    app.include_router(create_router(state))
    return app


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the maintenance-report server")
    parser.add_argument("--config", type=Path, default=None, help="Path to config YAML")
    parser.add_argument("--log-level", default="info", help="uvicorn log level")
    args = parser.parse_args()

    runtime_app = create_app(config_path=args.config)
    runtime: RuntimeState = runtime_app.state.runtime
    LOGGER.info("Starting server on %s:%d", runtime.config.server.host, runtime.config.server.port)
    uvicorn.run(
        runtime_app,
        host=runtime.config.server.host,
        port=runtime.config.server.port,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
