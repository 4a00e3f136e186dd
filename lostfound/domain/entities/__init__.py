"""Domain entities exposed by the application."""

from .announcement import Announcement, FailedDelivery
from .delivery import DeliveryOutcome, DeliveryStatus, PushMessage
from .notification import (
    NOTIFICATION_TYPE_GLOBAL_ANNOUNCEMENT,
    Notification,
    NotificationImage,
)
from .recipient import Recipient

__all__ = [
    "Announcement",
    "FailedDelivery",
    "DeliveryOutcome",
    "DeliveryStatus",
    "PushMessage",
    "NOTIFICATION_TYPE_GLOBAL_ANNOUNCEMENT",
    "Notification",
    "NotificationImage",
    "Recipient",
]
