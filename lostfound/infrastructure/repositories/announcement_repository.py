"""Persistence helpers for global announcements."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.orm import Session

from lostfound.domain.entities import Announcement, FailedDelivery
from lostfound.infrastructure.models import GlobalAnnouncementModel
from lostfound.utils import ensure_utc


class AnnouncementRepository:
    """Provide create/update operations for :class:`Announcement` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, announcement_id: int) -> Announcement | None:
        model = self.session.get(GlobalAnnouncementModel, announcement_id)
        return self._to_entity(model) if model is not None else None

    def create(self, announcement: Announcement) -> Announcement:
        """Insert ``announcement`` with an empty failure list and return it with its id."""

        model = GlobalAnnouncementModel(
            message=announcement.message,
            description=announcement.description,
            image_id=announcement.image_id,
            sent_by=announcement.sent_by,
            failed_user_ids=[],
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def record_failures(
        self, announcement_id: int, failed: Iterable[FailedDelivery]
    ) -> None:
        """Replace the failure list stored on the announcement."""

        model = self.session.get(GlobalAnnouncementModel, announcement_id)
        if model is None:
            msg = f"Announcement with id {announcement_id} not found"
            raise ValueError(msg)
        model.failed_user_ids = [item.to_dict() for item in failed]
        self.session.add(model)
        self.session.commit()

    @staticmethod
    def _to_entity(model: GlobalAnnouncementModel) -> Announcement:
        return Announcement(
            id=model.id,
            message=model.message,
            description=model.description,
            image_id=model.image_id,
            sent_by=model.sent_by,
            failed_deliveries=[
                FailedDelivery.from_dict(item) for item in model.failed_user_ids or []
            ],
            created_at=ensure_utc(model.created_at),
        )


__all__ = ["AnnouncementRepository"]
