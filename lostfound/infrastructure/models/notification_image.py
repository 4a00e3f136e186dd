"""SQLAlchemy model for notification images."""

import uuid

from sqlalchemy import Column, DateTime, String, Text

from lostfound.infrastructure.database import Base
from lostfound.utils import now_utc


class NotificationImageModel(Base):
    __tablename__ = "notification_image_table"

    image_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    image_url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)


__all__ = ["NotificationImageModel"]
