"""Persistence helpers for notification images."""

from __future__ import annotations

from sqlalchemy.orm import Session

from lostfound.domain.entities import NotificationImage
from lostfound.infrastructure.models import NotificationImageModel
from lostfound.utils import ensure_utc


class NotificationImageRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, image_url: str) -> NotificationImage:
        model = NotificationImageModel(image_url=image_url)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return NotificationImage(
            id=model.image_id,
            image_url=model.image_url,
            created_at=ensure_utc(model.created_at),
        )


__all__ = ["NotificationImageRepository"]
