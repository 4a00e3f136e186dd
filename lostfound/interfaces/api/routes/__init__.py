from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from lostfound.interfaces.api.routes_helpers import http_error_handler

from .announcements import router as announcements_router
from .health import router as health_router
from .notifications import router as notifications_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(health_router)
    app.include_router(announcements_router)
    app.include_router(notifications_router)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
