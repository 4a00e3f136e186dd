"""Service-account credential exchange for the push gateway.

The push gateway accepts OAuth bearer tokens. A token is obtained by signing
a short-lived JWT assertion with the service account's private key and
exchanging it at the OAuth token endpoint (the JWT bearer grant).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx
from jose import jwt
from jose.exceptions import JOSEError

from lostfound.config import Settings, get_settings
from lostfound.domain.exceptions import PushCredentialsError
from lostfound.utils import Clock, system_clock

logger = logging.getLogger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
JWT_BEARER_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME_SECONDS = 3600
_REQUIRED_FIELDS = ("client_email", "private_key", "project_id")


@dataclass(frozen=True)
class ServiceAccount:
    client_email: str
    private_key: str
    project_id: str


@dataclass(frozen=True)
class AccessToken:
    """Bearer token plus the project addressed by the gateway endpoint."""

    access_token: str
    project_id: str


def load_service_account(raw: str | None) -> ServiceAccount:
    """Parse the service-account JSON bundle and check its required fields."""

    try:
        info: Any = json.loads(raw or "{}")
    except json.JSONDecodeError as exc:
        raise PushCredentialsError("Invalid or missing service account credentials") from exc
    if not isinstance(info, dict):
        raise PushCredentialsError("Invalid or missing service account credentials")

    values = {name: str(info.get(name) or "").strip() for name in _REQUIRED_FIELDS}
    if not all(values.values()):
        raise PushCredentialsError("Invalid or missing service account credentials")

    private_key = values["private_key"].replace("\\n", "\n")
    if not private_key.endswith("\n"):
        private_key = f"{private_key}\n"
    return ServiceAccount(
        client_email=values["client_email"],
        private_key=private_key,
        project_id=values["project_id"],
    )


def build_assertion(account: ServiceAccount, *, audience: str, issued_at: int) -> str:
    """Return the RS256-signed JWT assertion for ``account``."""

    claims = {
        "iss": account.client_email,
        "scope": CLOUD_PLATFORM_SCOPE,
        "aud": audience,
        "iat": issued_at,
        "exp": issued_at + ASSERTION_LIFETIME_SECONDS,
    }
    try:
        return jwt.encode(claims, account.private_key, algorithm="RS256")
    except JOSEError as exc:
        raise PushCredentialsError(f"Could not sign service account assertion: {exc}") from exc


async def exchange_access_token(
    client: httpx.AsyncClient,
    *,
    settings: Settings | None = None,
    clock: Clock = system_clock,
) -> AccessToken:
    """Exchange a signed assertion for a push gateway bearer token."""

    settings = settings or get_settings()
    account = load_service_account(settings.firebase_service_account)
    assertion = build_assertion(
        account,
        audience=settings.oauth_token_url,
        issued_at=int(clock.now().timestamp()),
    )

    try:
        response = await client.post(
            settings.oauth_token_url,
            data={"grant_type": JWT_BEARER_GRANT_TYPE, "assertion": assertion},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
    except httpx.HTTPError as exc:
        raise PushCredentialsError(f"Token exchange failed: {exc}") from exc

    if not response.is_success:
        raise PushCredentialsError(f"Token exchange failed: {response.text}")

    try:
        access_token = response.json()["access_token"]
    except (ValueError, KeyError, TypeError) as exc:
        raise PushCredentialsError("Token exchange failed: no access_token in response") from exc

    logger.info("Obtained push gateway access token for project %s", account.project_id)
    return AccessToken(access_token=access_token, project_id=account.project_id)


__all__ = [
    "AccessToken",
    "ServiceAccount",
    "build_assertion",
    "exchange_access_token",
    "load_service_account",
]
