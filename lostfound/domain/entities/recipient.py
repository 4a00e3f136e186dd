"""Domain entity describing a push notification recipient."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Recipient:
    """A user account and the device token registered for it, if any."""

    user_id: str
    notification_token: str | None = None

    @property
    def has_token(self) -> bool:
        return bool(self.notification_token)


__all__ = ["Recipient"]
