"""Shared FastAPI dependencies for the push endpoints."""

from collections.abc import AsyncIterator

import httpx

from lostfound.config import get_settings
from lostfound.utils import Clock, system_clock


async def get_push_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """Yield an HTTP client for the token endpoint and push gateway."""

    settings = get_settings()
    async with httpx.AsyncClient(timeout=settings.push_request_timeout_seconds) as client:
        yield client


def get_clock() -> Clock:
    return system_clock
