"""Push gateway integration: credential exchange and per-device delivery."""

from .credentials import (
    AccessToken,
    ServiceAccount,
    build_assertion,
    exchange_access_token,
    load_service_account,
)
from .fcm import FcmSender, backoff_seconds, build_message, build_platform_hints

__all__ = [
    "AccessToken",
    "ServiceAccount",
    "build_assertion",
    "exchange_access_token",
    "load_service_account",
    "FcmSender",
    "backoff_seconds",
    "build_message",
    "build_platform_hints",
]
