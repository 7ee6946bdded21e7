from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter

from .routes.health import create_health_routes
from .routes.interchange import create_interchange_routes
from .routes.reports import create_report_routes

if TYPE_CHECKING:
    from .app import RuntimeState


def create_router(state: RuntimeState) -> APIRouter:
    router = APIRouter()
    router.include_router(create_health_routes(state))
    # Fixed paths such as /api/reports/export must register before /api/reports/{id}.
    router.include_router(create_interchange_routes(state))
    router.include_router(create_report_routes(state))
    return router
