"""SQLAlchemy model for persisted per-user notifications."""

import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import expression

from lostfound.infrastructure.database import Base
from lostfound.utils import now_utc


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notification_table"
    __table_args__ = (
        UniqueConstraint(
            "global_announcement_id",
            "sent_to",
            name="uq_notification_announcement_recipient",
        ),
    )

    notification_id = Column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    sent_to = Column(String(64), nullable=False, index=True)
    sent_by = Column(String(64), nullable=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(50), nullable=False)
    image_id = Column(
        String(36), ForeignKey("notification_image_table.image_id"), nullable=True
    )
    is_read = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    global_announcement_id = Column(
        Integer,
        ForeignKey("global_announcements_table.id"),
        nullable=True,
        index=True,
    )
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)


__all__ = ["NotificationModel"]
