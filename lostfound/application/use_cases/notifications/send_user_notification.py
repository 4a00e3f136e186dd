"""Use case for notifying one user and pushing the message to their device."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Any

import httpx
from anyio import to_thread
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lostfound.application.use_cases.images import store_notification_image
from lostfound.config import Settings, get_settings
from lostfound.domain.entities import Notification, PushMessage, Recipient
from lostfound.domain.exceptions import (
    InvalidAnnouncementRequest,
    NotificationCreationError,
    PushCredentialsError,
    RecipientFetchError,
    RecipientNotFound,
)
from lostfound.infrastructure.push import FcmSender, exchange_access_token
from lostfound.infrastructure.repositories import NotificationRepository, UserRepository
from lostfound.utils import Clock, system_clock

logger = logging.getLogger(__name__)


@dataclass
class UserNotificationResult:
    notification: Notification
    has_token: bool
    push_sent: bool = False
    push_error: str | None = None


def _store_notification(
    session: Session,
    *,
    user_id: str,
    title: str,
    body: str,
    type: str,
    description: str | None,
    data: dict[str, Any],
    image_url: str | None,
) -> tuple[Recipient, Notification]:
    try:
        recipient = UserRepository(session).get_recipient(user_id)
    except SQLAlchemyError as exc:
        session.rollback()
        raise RecipientFetchError("Failed to fetch user") from exc
    if recipient is None:
        raise RecipientNotFound("User not found")

    image_id = store_notification_image(session, image_url)

    try:
        notification = NotificationRepository(session).create(
            Notification(
                id=None,
                sent_to=recipient.user_id,
                title=title,
                type=type,
                description=description or body,
                sent_by=data.get("sent_by"),
                image_id=image_id,
                is_read=False,
                data=data,
            )
        )
    except SQLAlchemyError as exc:
        session.rollback()
        raise NotificationCreationError("Failed to create notification") from exc
    return recipient, notification


async def send_user_notification(
    session: Session,
    *,
    user_id: str | None,
    title: str | None,
    body: str | None,
    type: str | None,
    http_client: httpx.AsyncClient,
    description: str | None = None,
    data: dict[str, Any] | None = None,
    image_url: str | None = None,
    settings: Settings | None = None,
    clock: Clock = system_clock,
) -> UserNotificationResult:
    """Store a notification for ``user_id`` and push it when the user has a token.

    The stored notification is the source of truth: a push failure is
    reported in the result but never raised.
    """

    if not (user_id and title and body and type):
        raise InvalidAnnouncementRequest("Missing user_id, title, body, or type")
    settings = settings or get_settings()
    data = dict(data or {})

    recipient, notification = await to_thread.run_sync(
        partial(
            _store_notification,
            session,
            user_id=user_id,
            title=title,
            body=body,
            type=type,
            description=description,
            data=data,
            image_url=image_url,
        )
    )

    result = UserNotificationResult(notification=notification, has_token=recipient.has_token)
    if not recipient.has_token:
        return result

    push_data = dict(data)
    if image_url:
        push_data["image_url"] = image_url
    try:
        access_token = await exchange_access_token(http_client, settings=settings, clock=clock)
    except PushCredentialsError as exc:
        logger.error("Push to user %s skipped: %s", recipient.user_id, exc)
        result.push_error = str(exc)
        return result

    sender = FcmSender(
        http_client,
        access_token,
        base_url=settings.fcm_base_url,
        max_retries=settings.push_max_retries,
        clock=clock,
    )
    outcome = await sender.send(
        recipient.notification_token or "",
        PushMessage(title=title, body=body, description=description, data=push_data),
    )
    result.push_sent = outcome.succeeded
    if not outcome.succeeded:
        logger.error("Push to user %s failed: %s", recipient.user_id, outcome.reason)
        result.push_error = outcome.reason
    return result


__all__ = ["UserNotificationResult", "send_user_notification"]
