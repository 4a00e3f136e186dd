"""SQLAlchemy model for global announcements."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text

from lostfound.infrastructure.database import Base
from lostfound.utils import now_utc


class GlobalAnnouncementModel(Base):
    """Database representation of a broadcast sent to every user."""

    __tablename__ = "global_announcements_table"

    id = Column(Integer, primary_key=True, autoincrement=True)
    message = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    image_id = Column(
        String(36), ForeignKey("notification_image_table.image_id"), nullable=True
    )
    sent_by = Column(String(64), nullable=True)
    failed_user_ids = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)


__all__ = ["GlobalAnnouncementModel"]
