"""Errors raised while creating and fanning out announcements."""


class AnnouncementError(Exception):
    """Base class for failures surfaced to API callers."""

    status_code = 500


class InvalidAnnouncementRequest(AnnouncementError):
    """The request cannot be processed as sent."""

    status_code = 400


class RecipientNotFound(AnnouncementError):
    status_code = 404


class AnnouncementCreationError(AnnouncementError):
    """The announcement record could not be stored."""


class RecipientFetchError(AnnouncementError):
    """The recipient population could not be read."""


class PushCredentialsError(AnnouncementError):
    """No access token could be obtained for the push gateway."""


class NotificationCreationError(AnnouncementError):
    """A single user notification could not be stored."""


__all__ = [
    "NotificationCreationError",
    "AnnouncementError",
    "InvalidAnnouncementRequest",
    "RecipientNotFound",
    "AnnouncementCreationError",
    "RecipientFetchError",
    "PushCredentialsError",
]
