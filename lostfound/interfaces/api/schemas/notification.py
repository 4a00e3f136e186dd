"""Pydantic models describing single-user notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .fields import coerce_text


class UserNotificationRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user_id: str | None = None
    title: str | None = None
    body: str | None = None
    type: str | None = None
    description: str | None = None
    data: dict[str, Any] | None = None
    image_url: str | None = None

    @field_validator(
        "user_id", "title", "body", "type", "description", "image_url", mode="before"
    )
    @classmethod
    def coerce_text_fields(cls, value: Any) -> Any:
        return coerce_text(value)


class NotificationRead(BaseModel):
    """Representation of a stored notification returned to the client."""

    notification_id: str
    sent_to: str
    sent_by: str | None = None
    title: str
    description: str | None = None
    type: str
    image_id: str | None = None
    is_read: bool = False
    global_announcement_id: int | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None


class PushResultRead(BaseModel):
    sent: bool
    error: str | None = None
    has_token: bool


class UserNotificationResponse(BaseModel):
    success: bool = True
    inserted: NotificationRead
    fcm: PushResultRead


__all__ = [
    "NotificationRead",
    "PushResultRead",
    "UserNotificationRequest",
    "UserNotificationResponse",
]
