"""Use cases for broadcasting global announcements."""

from .dispatch import DispatchResult, TIMEOUT_REASON, dispatch_push_batch
from .send_global_announcement import (
    NO_TOKEN_REASON,
    AnnouncementStats,
    GlobalAnnouncementResult,
    send_global_announcement,
)

__all__ = [
    "DispatchResult",
    "TIMEOUT_REASON",
    "dispatch_push_batch",
    "NO_TOKEN_REASON",
    "AnnouncementStats",
    "GlobalAnnouncementResult",
    "send_global_announcement",
]
