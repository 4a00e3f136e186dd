import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from lostfound.config import get_settings
from lostfound.infrastructure.database import engine, initialize_database
from lostfound.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup and release the pool on shutdown."""

    initialize_database()
    yield
    engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # CORS headers are set on each function response, including the 204 preflight.
    app = FastAPI(title="Lost & Found announcements", lifespan=lifespan)
    register_routes(app)
    return app


app = create_app()
