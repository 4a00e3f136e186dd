"""Repository implementations for infrastructure layer."""

from .announcement_repository import AnnouncementRepository
from .notification_image_repository import NotificationImageRepository
from .notification_repository import DEFAULT_INSERT_BATCH_SIZE, NotificationRepository
from .user_repository import UserRepository

__all__ = [
    "AnnouncementRepository",
    "NotificationImageRepository",
    "NotificationRepository",
    "DEFAULT_INSERT_BATCH_SIZE",
    "UserRepository",
]
