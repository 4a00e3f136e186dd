"""Domain entities describing a single push delivery."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DeliveryStatus(str, Enum):
    SUCCESS = "success"
    RETRIABLE_FAILURE = "retriable_failure"
    PERMANENT_FAILURE = "permanent_failure"


@dataclass(frozen=True)
class PushMessage:
    """Content pushed to a device.

    ``description`` takes precedence over ``body`` as the visible text. An
    ``image_url`` entry in ``data`` enables rich image rendering.
    """

    title: str
    body: str
    description: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def display_body(self) -> str:
        return self.description or self.body

    @property
    def image_url(self) -> str | None:
        value = self.data.get("image_url")
        return str(value) if value else None


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of pushing one message to one device token."""

    status: DeliveryStatus
    reason: str | None = None
    attempts: int = 1

    @classmethod
    def success(cls, *, attempts: int = 1) -> "DeliveryOutcome":
        return cls(DeliveryStatus.SUCCESS, None, attempts)

    @classmethod
    def retriable(cls, reason: str, *, attempts: int = 1) -> "DeliveryOutcome":
        return cls(DeliveryStatus.RETRIABLE_FAILURE, reason, attempts)

    @classmethod
    def permanent(cls, reason: str, *, attempts: int = 1) -> "DeliveryOutcome":
        return cls(DeliveryStatus.PERMANENT_FAILURE, reason, attempts)

    @property
    def succeeded(self) -> bool:
        return self.status is DeliveryStatus.SUCCESS

    @property
    def is_retriable(self) -> bool:
        return self.status is DeliveryStatus.RETRIABLE_FAILURE


__all__ = ["DeliveryOutcome", "DeliveryStatus", "PushMessage"]
