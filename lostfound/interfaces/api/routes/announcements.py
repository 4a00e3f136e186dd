"""Endpoint that broadcasts a global announcement to every user."""

from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from lostfound.application.use_cases.announcements import (
    GlobalAnnouncementResult,
    send_global_announcement,
)
from lostfound.domain.exceptions import AnnouncementError
from lostfound.infrastructure.database import get_db
from lostfound.interfaces.api.dependencies import get_clock, get_push_http_client
from lostfound.interfaces.api.routes_helpers import (
    InvalidRequestBody,
    announcement_error_response,
    error_response,
    json_response,
    parse_body,
    preflight_response,
    unhandled_error_response,
)
from lostfound.interfaces.api.schemas import (
    AnnouncementStatsRead,
    FailedUserRead,
    GlobalAnnouncementRequest,
    GlobalAnnouncementResponse,
)
from lostfound.utils import Clock

router = APIRouter(prefix="/functions", tags=["announcements"])

_PATH = "/send-global-announcements"


def _to_response(result: GlobalAnnouncementResult) -> GlobalAnnouncementResponse:
    if result.no_users:
        return GlobalAnnouncementResponse(
            message="No users found",
            global_notification_id=result.announcement_id,
        )
    stats = result.stats
    return GlobalAnnouncementResponse(
        global_notification_id=result.announcement_id,
        stats=AnnouncementStatsRead(
            total_users=stats.total_users,
            users_with_tokens=stats.users_with_tokens,
            users_without_tokens=stats.users_without_tokens,
            push_successful=stats.push_successful,
            push_failed=stats.push_failed,
            retriable_failed=stats.retriable_failed,
            execution_time_ms=stats.execution_time_ms,
        ),
        failed_users=[
            FailedUserRead(user_id=item.user_id, retriable=item.retriable, reason=item.reason)
            for item in result.failed_users
        ]
        or None,
    )


@router.options(_PATH, include_in_schema=False)
def global_announcements_preflight() -> Response:
    return preflight_response()


@router.post(_PATH, response_model=GlobalAnnouncementResponse)
async def send_global_announcements(
    request: Request,
    db: Session = Depends(get_db),
    http_client: httpx.AsyncClient = Depends(get_push_http_client),
    clock: Clock = Depends(get_clock),
) -> JSONResponse:
    """Store an announcement, notify every user and push it to all registered devices."""

    try:
        payload = await parse_body(request, GlobalAnnouncementRequest)
    except InvalidRequestBody as exc:
        return error_response(str(exc), status.HTTP_400_BAD_REQUEST)

    try:
        result = await send_global_announcement(
            db,
            message=payload.message,
            description=payload.description,
            image_url=payload.image_url,
            sent_by=payload.user_id,
            http_client=http_client,
            clock=clock,
        )
    except AnnouncementError as exc:
        return announcement_error_response(exc)
    except Exception as exc:
        return unhandled_error_response(exc)

    return json_response(_to_response(result).model_dump(mode="json", exclude_none=True))
