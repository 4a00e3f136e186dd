"""Domain entity representing a global announcement."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class FailedDelivery:
    """A recipient the announcement push could not be delivered to."""

    user_id: str
    retriable: bool
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"user_id": self.user_id, "retriable": self.retriable, "reason": self.reason}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FailedDelivery":
        return cls(
            user_id=str(data.get("user_id")),
            retriable=bool(data.get("retriable")),
            reason=str(data.get("reason") or ""),
        )


@dataclass
class Announcement:
    """One broadcast event addressed to every user of the application."""

    id: int | None
    message: str
    description: str | None = None
    image_id: str | None = None
    sent_by: str | None = None
    failed_deliveries: list[FailedDelivery] = field(default_factory=list)
    created_at: datetime | None = None


__all__ = ["Announcement", "FailedDelivery"]
