from .announcement import (
    AnnouncementStatsRead,
    FailedUserRead,
    GlobalAnnouncementRequest,
    GlobalAnnouncementResponse,
)
from .notification import (
    NotificationRead,
    PushResultRead,
    UserNotificationRequest,
    UserNotificationResponse,
)

__all__ = [
    "AnnouncementStatsRead",
    "FailedUserRead",
    "GlobalAnnouncementRequest",
    "GlobalAnnouncementResponse",
    "NotificationRead",
    "PushResultRead",
    "UserNotificationRequest",
    "UserNotificationResponse",
]
