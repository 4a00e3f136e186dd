"""Pydantic models describing global announcement payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .fields import coerce_text


class GlobalAnnouncementRequest(BaseModel):
    """Body accepted by the global announcement endpoint."""

    model_config = ConfigDict(extra="ignore")

    message: str | None = None
    description: str | None = None
    image_url: str | None = None
    user_id: str | None = Field(default=None, description="Identifier of the sender")

    @field_validator("message", "description", "image_url", "user_id", mode="before")
    @classmethod
    def coerce_text_fields(cls, value: Any) -> Any:
        return coerce_text(value)


class FailedUserRead(BaseModel):
    user_id: str
    retriable: bool
    reason: str


class AnnouncementStatsRead(BaseModel):
    total_users: int
    users_with_tokens: int
    users_without_tokens: int
    push_successful: int
    push_failed: int
    retriable_failed: int
    execution_time_ms: int


class GlobalAnnouncementResponse(BaseModel):
    """Summary returned once the fan-out finished.

    ``failed_users`` is omitted when every push succeeded; ``message`` is only
    set when there was nobody to notify.
    """

    success: bool = True
    message: str | None = None
    global_notification_id: int
    stats: AnnouncementStatsRead | None = None
    failed_users: list[FailedUserRead] | None = None


__all__ = [
    "AnnouncementStatsRead",
    "FailedUserRead",
    "GlobalAnnouncementRequest",
    "GlobalAnnouncementResponse",
]
