"""ORM models used by the application infrastructure."""

from .user import UserModel
from .notification_image import NotificationImageModel
from .announcement import GlobalAnnouncementModel
from .notification import NotificationModel

__all__ = [
    "UserModel",
    "NotificationImageModel",
    "GlobalAnnouncementModel",
    "NotificationModel",
]
