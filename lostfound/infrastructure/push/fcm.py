"""Delivery of a single push message through the FCM HTTP v1 API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from lostfound.domain.entities import DeliveryOutcome, PushMessage
from lostfound.utils import Clock, system_clock

from .credentials import AccessToken

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3
BACKOFF_BASE_MS = 1000
BACKOFF_CAP_MS = 10000
REASON_BODY_LIMIT = 100


def build_platform_hints(image_url: str | None) -> dict[str, Any]:
    """Return the Android and APNs fields that make ``image_url`` render as a rich image."""

    if not image_url:
        return {}
    return {
        "android": {"notification": {"image": image_url}},
        "apns": {
            "payload": {"aps": {"mutable-content": 1}},
            "fcm_options": {"image": image_url},
        },
    }


def _string_data(data: dict[str, Any]) -> dict[str, str]:
    # The gateway only accepts a flat string-to-string map.
    return {str(key): str(value) for key, value in data.items() if value is not None}


def build_message(token: str, message: PushMessage) -> dict[str, Any]:
    """Build the ``messages:send`` request body for one device."""

    return {
        "message": {
            "token": token,
            "notification": {"title": message.title, "body": message.display_body},
            "data": _string_data(message.data),
            **build_platform_hints(message.image_url),
        }
    }


def backoff_seconds(retry_count: int) -> float:
    """Delay before retry number ``retry_count + 1``."""

    return min(BACKOFF_BASE_MS * 2**retry_count, BACKOFF_CAP_MS) / 1000


def is_retriable_status(status_code: int) -> bool:
    return status_code >= 500 or status_code == 429


class FcmSender:
    """Send push messages to individual devices with bounded retries."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        access_token: AccessToken,
        *,
        base_url: str = "https://fcm.googleapis.com",
        max_retries: int = DEFAULT_MAX_RETRIES,
        clock: Clock = system_clock,
    ) -> None:
        self._client = client
        self._access_token = access_token
        self._url = (
            f"{base_url.rstrip('/')}/v1/projects/{access_token.project_id}/messages:send"
        )
        self._max_retries = max_retries
        self._clock = clock

    async def send(self, token: str, message: PushMessage) -> DeliveryOutcome:
        """Deliver ``message`` to ``token`` and classify the result.

        Server errors, rate limiting and transport errors are retried with
        exponential backoff up to ``max_retries`` times. Other client errors
        fail immediately and are not retriable.
        """

        body = build_message(token, message)
        headers = {
            "Authorization": f"Bearer {self._access_token.access_token}",
            "Content-Type": "application/json",
        }
        retry_count = 0
        while True:
            attempts = retry_count + 1
            try:
                response = await self._client.post(self._url, json=body, headers=headers)
            except httpx.HTTPError as exc:
                reason = str(exc) or exc.__class__.__name__
                if retry_count < self._max_retries:
                    await self._wait_before_retry(token, reason, retry_count)
                    retry_count += 1
                    continue
                return DeliveryOutcome.retriable(reason, attempts=attempts)

            if response.is_success:
                return DeliveryOutcome.success(attempts=attempts)

            retriable = is_retriable_status(response.status_code)
            reason = f"{response.status_code} {response.text[:REASON_BODY_LIMIT]}"
            if retriable and retry_count < self._max_retries:
                await self._wait_before_retry(token, reason, retry_count)
                retry_count += 1
                continue
            if retriable:
                return DeliveryOutcome.retriable(reason, attempts=attempts)
            return DeliveryOutcome.permanent(reason, attempts=attempts)

    async def _wait_before_retry(self, token: str, reason: str, retry_count: int) -> None:
        delay = backoff_seconds(retry_count)
        logger.warning(
            "Push to %s... failed (%s); retry %s in %.1fs",
            token[:12],
            reason,
            retry_count + 1,
            delay,
        )
        await self._clock.sleep(delay)


__all__ = [
    "FcmSender",
    "backoff_seconds",
    "build_message",
    "build_platform_hints",
    "is_retriable_status",
]
