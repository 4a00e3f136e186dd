"""Aggregate application use cases."""

from .announcements import send_global_announcement
from .notifications import send_user_notification

__all__ = [
    "send_global_announcement",
    "send_user_notification",
]
