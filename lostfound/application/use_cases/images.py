"""Best-effort storage of images attached to notifications."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lostfound.infrastructure.repositories import NotificationImageRepository

logger = logging.getLogger(__name__)


def store_notification_image(session: Session, image_url: str | None) -> str | None:
    """Persist ``image_url`` and return the new image id.

    Returns ``None`` when there is no image or when it could not be stored;
    the notification is then sent without an image reference.
    """

    if not image_url:
        return None
    try:
        return NotificationImageRepository(session).create(image_url).id
    except SQLAlchemyError:
        session.rollback()
        logger.warning("Failed to insert notification image %s", image_url, exc_info=True)
        return None


__all__ = ["store_notification_image"]
