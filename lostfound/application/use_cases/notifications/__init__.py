"""Use cases for notifying a single user."""

from .send_user_notification import UserNotificationResult, send_user_notification

__all__ = ["UserNotificationResult", "send_user_notification"]
