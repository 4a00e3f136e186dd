"""Persistence helpers for per-user notification entities."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from lostfound.domain.entities import (
    NOTIFICATION_TYPE_GLOBAL_ANNOUNCEMENT,
    Notification,
)
from lostfound.infrastructure.models import NotificationModel
from lostfound.utils import ensure_utc

logger = logging.getLogger(__name__)

DEFAULT_INSERT_BATCH_SIZE = 500


class NotificationRepository:
    """Provide create and fan-out operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_announcement(self, announcement_id: int) -> Sequence[Notification]:
        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.global_announcement_id == announcement_id)
            .order_by(NotificationModel.sent_to)
        )
        return [self._to_entity(model) for model in query.all()]

    def has_for_announcement(self, announcement_id: int) -> bool:
        """Return ``True`` when any notification already references the announcement.

        A failed lookup counts as "none found"; the unique constraint on
        (announcement, recipient) still keeps the following insert from
        duplicating rows.
        """

        try:
            row = (
                self.session.query(NotificationModel.notification_id)
                .filter(NotificationModel.global_announcement_id == announcement_id)
                .limit(1)
                .first()
            )
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception(
                "Could not check existing notifications for announcement %s",
                announcement_id,
            )
            return False
        return row is not None

    def create(self, notification: Notification) -> Notification:
        model = self._to_model(notification)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def insert_for_users(
        self,
        user_ids: Sequence[str],
        *,
        announcement_id: int,
        title: str,
        description: str | None,
        image_id: str | None,
        sent_by: str | None,
        batch_size: int = DEFAULT_INSERT_BATCH_SIZE,
    ) -> int:
        """Insert one unread announcement notification per user, ``batch_size`` rows at a time.

        A batch that fails is logged and skipped so the remaining batches are
        still written. Returns the number of rows inserted.
        """

        if batch_size <= 0:
            raise ValueError("batch_size must be positive")

        inserted = 0
        for start in range(0, len(user_ids), batch_size):
            batch = user_ids[start : start + batch_size]
            models = [
                self._to_model(
                    Notification(
                        id=None,
                        sent_to=user_id,
                        title=title,
                        type=NOTIFICATION_TYPE_GLOBAL_ANNOUNCEMENT,
                        description=description,
                        sent_by=sent_by,
                        image_id=image_id,
                        is_read=False,
                        global_announcement_id=announcement_id,
                        data={"global_notification_id": str(announcement_id)},
                    )
                )
                for user_id in batch
            ]
            try:
                self.session.add_all(models)
                self.session.commit()
            except IntegrityError:
                self.session.rollback()
                logger.warning(
                    "Notification batch %s-%s for announcement %s hit existing rows; "
                    "inserting individually",
                    start,
                    start + len(batch),
                    announcement_id,
                )
                inserted += self._insert_missing(models)
            except SQLAlchemyError:
                self.session.rollback()
                logger.exception(
                    "Failed to insert notification batch %s-%s for announcement %s",
                    start,
                    start + len(batch),
                    announcement_id,
                )
            else:
                inserted += len(models)
        return inserted

    def _insert_missing(self, models: Sequence[NotificationModel]) -> int:
        inserted = 0
        for model in models:
            candidate = NotificationModel(
                sent_to=model.sent_to,
                sent_by=model.sent_by,
                title=model.title,
                description=model.description,
                type=model.type,
                image_id=model.image_id,
                is_read=False,
                global_announcement_id=model.global_announcement_id,
                data=dict(model.data or {}),
            )
            try:
                self.session.add(candidate)
                self.session.commit()
            except IntegrityError:
                self.session.rollback()
                continue
            inserted += 1
        return inserted

    @staticmethod
    def _to_model(notification: Notification) -> NotificationModel:
        model = NotificationModel(
            sent_to=notification.sent_to,
            sent_by=notification.sent_by,
            title=notification.title,
            description=notification.description,
            type=notification.type,
            image_id=notification.image_id,
            is_read=notification.is_read,
            global_announcement_id=notification.global_announcement_id,
            data=notification.data or {},
        )
        if notification.id is not None:
            model.notification_id = notification.id
        return model

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.notification_id,
            sent_to=model.sent_to,
            title=model.title,
            type=model.type,
            description=model.description,
            sent_by=model.sent_by,
            image_id=model.image_id,
            is_read=bool(model.is_read),
            global_announcement_id=model.global_announcement_id,
            data=model.data or {},
            created_at=ensure_utc(model.created_at),
        )


__all__ = ["NotificationRepository", "DEFAULT_INSERT_BATCH_SIZE"]
