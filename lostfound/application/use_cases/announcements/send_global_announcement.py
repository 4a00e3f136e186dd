"""Use case that fans a global announcement out to every user."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from functools import partial

import httpx
from anyio import to_thread
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lostfound.application.use_cases.images import store_notification_image
from lostfound.config import Settings, get_settings
from lostfound.domain.entities import Announcement, FailedDelivery, PushMessage, Recipient
from lostfound.domain.exceptions import (
    AnnouncementCreationError,
    InvalidAnnouncementRequest,
    RecipientFetchError,
)
from lostfound.infrastructure.push import FcmSender, exchange_access_token
from lostfound.infrastructure.repositories import (
    AnnouncementRepository,
    NotificationRepository,
    UserRepository,
)
from lostfound.utils import Clock, elapsed_ms, system_clock

from .dispatch import DispatchResult, dispatch_push_batch

logger = logging.getLogger(__name__)

NO_TOKEN_REASON = "No notification token"


@dataclass
class AnnouncementStats:
    total_users: int = 0
    users_with_tokens: int = 0
    users_without_tokens: int = 0
    push_successful: int = 0
    push_failed: int = 0
    retriable_failed: int = 0
    execution_time_ms: int = 0


@dataclass
class GlobalAnnouncementResult:
    """Outcome of one fan-out request.

    ``failed_users`` holds gateway failures followed by users without a
    device token. ``no_users`` is set when the user table was empty and
    nothing beyond the announcement record was written.
    """

    announcement_id: int
    stats: AnnouncementStats = field(default_factory=AnnouncementStats)
    failed_users: list[FailedDelivery] = field(default_factory=list)
    no_users: bool = False


def _create_announcement(
    session: Session,
    *,
    message: str,
    description: str | None,
    image_url: str | None,
    sent_by: str | None,
) -> tuple[int, str | None]:
    image_id = store_notification_image(session, image_url)
    try:
        announcement = AnnouncementRepository(session).create(
            Announcement(
                id=None,
                message=message,
                description=description,
                image_id=image_id,
                sent_by=sent_by,
            )
        )
    except SQLAlchemyError as exc:
        session.rollback()
        raise AnnouncementCreationError("Failed to create announcement record") from exc
    if announcement.id is None:  # pragma: no cover - primary key is always assigned
        raise AnnouncementCreationError("Failed to create announcement record")
    return announcement.id, image_id


def _load_recipients(session: Session) -> list[Recipient]:
    try:
        return list(UserRepository(session).list_recipients())
    except SQLAlchemyError as exc:
        session.rollback()
        raise RecipientFetchError("Failed to fetch users") from exc


def _write_notifications(
    session: Session,
    recipients: Sequence[Recipient],
    *,
    announcement_id: int,
    title: str,
    description: str | None,
    image_id: str | None,
    sent_by: str | None,
    batch_size: int,
) -> None:
    notifications = NotificationRepository(session)
    if notifications.has_for_announcement(announcement_id):
        logger.info(
            "Notifications for announcement %s already exist; skipping insert",
            announcement_id,
        )
        return
    inserted = notifications.insert_for_users(
        [recipient.user_id for recipient in recipients],
        announcement_id=announcement_id,
        title=title,
        description=description,
        image_id=image_id,
        sent_by=sent_by,
        batch_size=batch_size,
    )
    logger.info(
        "Inserted %s of %s notifications for announcement %s",
        inserted,
        len(recipients),
        announcement_id,
    )


def _record_failures(
    session: Session, announcement_id: int, failed_users: list[FailedDelivery]
) -> None:
    try:
        AnnouncementRepository(session).record_failures(announcement_id, failed_users)
    except (SQLAlchemyError, ValueError):
        session.rollback()
        logger.exception(
            "Failed to update failed_user_ids for announcement %s", announcement_id
        )


async def send_global_announcement(
    session: Session,
    *,
    message: str | None,
    http_client: httpx.AsyncClient,
    description: str | None = None,
    image_url: str | None = None,
    sent_by: str | None = None,
    settings: Settings | None = None,
    clock: Clock = system_clock,
) -> GlobalAnnouncementResult:
    """Create an announcement, write a notification per user and push it to every device.

    Steps run strictly in order: optional image row, announcement record,
    recipient snapshot, per-user notification rows (skipped when rows for
    the announcement already exist), credential exchange, windowed push
    delivery and finally the failure list update. Nothing is rolled back if
    a later step raises.

    Database work runs in a worker thread so the event loop keeps serving
    other requests while rows are written.
    """

    started_at = clock.monotonic()
    if not message:
        raise InvalidAnnouncementRequest("Missing message")
    settings = settings or get_settings()

    announcement_id, image_id = await to_thread.run_sync(
        partial(
            _create_announcement,
            session,
            message=message,
            description=description,
            image_url=image_url,
            sent_by=sent_by,
        )
    )
    logger.info("Created global announcement %s", announcement_id)

    recipients = await to_thread.run_sync(_load_recipients, session)
    if not recipients:
        logger.info("No users found for announcement %s", announcement_id)
        return GlobalAnnouncementResult(
            announcement_id=announcement_id,
            stats=AnnouncementStats(execution_time_ms=elapsed_ms(clock, started_at)),
            no_users=True,
        )

    await to_thread.run_sync(
        partial(
            _write_notifications,
            session,
            recipients,
            announcement_id=announcement_id,
            title=message,
            description=description,
            image_id=image_id,
            sent_by=sent_by,
            batch_size=settings.notification_insert_batch_size,
        )
    )

    with_tokens = [recipient for recipient in recipients if recipient.has_token]
    without_tokens = [recipient for recipient in recipients if not recipient.has_token]

    dispatch = DispatchResult()
    if with_tokens:
        access_token = await exchange_access_token(http_client, settings=settings, clock=clock)
        sender = FcmSender(
            http_client,
            access_token,
            base_url=settings.fcm_base_url,
            max_retries=settings.push_max_retries,
            clock=clock,
        )
        push_message = PushMessage(
            title=message,
            body=message,
            description=description,
            data={
                "image_url": image_url,
                "global_notification_id": str(announcement_id),
            },
        )
        dispatch = await dispatch_push_batch(
            with_tokens,
            push_message,
            sender,
            clock=clock,
            started_at=started_at,
            budget_seconds=settings.push_max_execution_seconds,
            window_size=settings.push_concurrency_limit,
        )

    failed_users = dispatch.failed + [
        FailedDelivery(user_id=recipient.user_id, retriable=False, reason=NO_TOKEN_REASON)
        for recipient in without_tokens
    ]
    await to_thread.run_sync(_record_failures, session, announcement_id, failed_users)

    stats = AnnouncementStats(
        total_users=len(recipients),
        users_with_tokens=len(with_tokens),
        users_without_tokens=len(without_tokens),
        push_successful=len(dispatch.successful),
        push_failed=len(dispatch.failed),
        retriable_failed=dispatch.retriable_count,
        execution_time_ms=elapsed_ms(clock, started_at),
    )
    logger.info(
        "Announcement %s fan-out finished: %s sent, %s failed (%s retriable), %s without token in %sms",
        announcement_id,
        stats.push_successful,
        stats.push_failed,
        stats.retriable_failed,
        stats.users_without_tokens,
        stats.execution_time_ms,
    )
    return GlobalAnnouncementResult(
        announcement_id=announcement_id,
        stats=stats,
        failed_users=failed_users,
    )


__all__ = [
    "AnnouncementStats",
    "GlobalAnnouncementResult",
    "NO_TOKEN_REASON",
    "send_global_announcement",
]
