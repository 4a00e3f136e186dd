"""Endpoint that notifies a single user."""

from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from lostfound.application.use_cases.notifications import (
    UserNotificationResult,
    send_user_notification,
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
    NotificationRead,
    PushResultRead,
    UserNotificationRequest,
    UserNotificationResponse,
)
from lostfound.utils import Clock

router = APIRouter(prefix="/functions", tags=["notifications"])

_PATH = "/send-notification"


def _to_response(result: UserNotificationResult) -> UserNotificationResponse:
    notification = result.notification
    return UserNotificationResponse(
        inserted=NotificationRead(
            notification_id=notification.id or "",
            sent_to=notification.sent_to,
            sent_by=notification.sent_by,
            title=notification.title,
            description=notification.description,
            type=notification.type,
            image_id=notification.image_id,
            is_read=notification.is_read,
            global_announcement_id=notification.global_announcement_id,
            data=notification.data or {},
            created_at=notification.created_at,
        ),
        fcm=PushResultRead(
            sent=result.push_sent,
            error=result.push_error,
            has_token=result.has_token,
        ),
    )


@router.options(_PATH, include_in_schema=False)
def send_notification_preflight() -> Response:
    return preflight_response()


@router.post(_PATH, response_model=UserNotificationResponse)
async def send_notification(
    request: Request,
    db: Session = Depends(get_db),
    http_client: httpx.AsyncClient = Depends(get_push_http_client),
    clock: Clock = Depends(get_clock),
) -> JSONResponse:
    """Store a notification for one user and push it to their device if registered."""

    try:
        payload = await parse_body(request, UserNotificationRequest)
    except InvalidRequestBody as exc:
        return error_response(str(exc), status.HTTP_400_BAD_REQUEST)

    try:
        result = await send_user_notification(
            db,
            user_id=payload.user_id,
            title=payload.title,
            body=payload.body,
            type=payload.type,
            description=payload.description,
            data=payload.data,
            image_url=payload.image_url,
            http_client=http_client,
            clock=clock,
        )
    except AnnouncementError as exc:
        return announcement_error_response(exc)
    except Exception as exc:
        return unhandled_error_response(exc)

    return json_response(_to_response(result).model_dump(mode="json"))
