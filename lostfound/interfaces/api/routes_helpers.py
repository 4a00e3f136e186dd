"""Helpers shared by the function-style endpoints."""

from __future__ import annotations

import json
import logging
from typing import Any, TypeVar

from fastapi import Request, Response, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from lostfound.domain.exceptions import AnnouncementError

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Max-Age": "86400",
}

ModelT = TypeVar("ModelT", bound=BaseModel)


class InvalidRequestBody(Exception):
    pass


def json_response(body: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    """Return ``body`` as JSON with the CORS headers attached."""

    return JSONResponse(content=body, status_code=status_code, headers=dict(CORS_HEADERS))


def error_response(message: str, status_code: int) -> JSONResponse:
    return json_response({"error": message}, status_code)


def preflight_response() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=dict(CORS_HEADERS))


def method_not_allowed_response() -> JSONResponse:
    return error_response("Method not allowed", status.HTTP_405_METHOD_NOT_ALLOWED)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Answer unsupported methods with the CORS-enabled ``{"error": ...}`` body."""

    if exc.status_code != status.HTTP_405_METHOD_NOT_ALLOWED:
        return await http_exception_handler(request, exc)
    response = method_not_allowed_response()
    response.headers.update(exc.headers or {})
    return response


async def parse_body(request: Request, model: type[ModelT]) -> ModelT:
    """Decode the JSON request body into ``model``."""

    try:
        raw = await request.json()
        return model.model_validate(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as exc:
        raise InvalidRequestBody("Invalid request body") from exc


def announcement_error_response(exc: AnnouncementError) -> JSONResponse:
    """Translate a use case error into the ``{"error": ...}`` response."""

    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc, exc_info=exc)
    return error_response(str(exc), exc.status_code)


def unhandled_error_response(exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error: %s", exc)
    return error_response(str(exc) or exc.__class__.__name__, status.HTTP_500_INTERNAL_SERVER_ERROR)


__all__ = [
    "CORS_HEADERS",
    "InvalidRequestBody",
    "announcement_error_response",
    "error_response",
    "http_error_handler",
    "json_response",
    "method_not_allowed_response",
    "parse_body",
    "preflight_response",
    "unhandled_error_response",
]
