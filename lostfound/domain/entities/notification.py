"""Domain entities representing per-user notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

NOTIFICATION_TYPE_GLOBAL_ANNOUNCEMENT = "global_announcement"


@dataclass
class Notification:
    """Durable record that a message was addressed to a specific user."""

    id: str | None
    sent_to: str
    title: str
    type: str
    description: str | None = None
    sent_by: str | None = None
    image_id: str | None = None
    is_read: bool = False
    global_announcement_id: int | None = None
    data: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None


@dataclass
class NotificationImage:
    """Image attached to one or more notifications."""

    id: str | None
    image_url: str
    created_at: datetime | None = None


__all__ = [
    "NOTIFICATION_TYPE_GLOBAL_ANNOUNCEMENT",
    "Notification",
    "NotificationImage",
]
