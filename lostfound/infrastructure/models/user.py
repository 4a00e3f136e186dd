"""SQLAlchemy model for the user table."""

from sqlalchemy import Column, String

from lostfound.infrastructure.database import Base


class UserModel(Base):
    """Application user and the push token registered by its device."""

    __tablename__ = "user_table"

    user_id = Column(String(64), primary_key=True)
    email = Column(String(255), nullable=True, index=True)
    notification_token = Column(String(512), nullable=True)


__all__ = ["UserModel"]
