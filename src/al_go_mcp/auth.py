"""GitHub credential selection and GitHub App installation tokens.

Credential precedence is static and evaluated exactly once at startup:
App triple (id + private key + installation id) → access token → anonymous.
There is no runtime switchover if the chosen credentials stop working.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Literal

import httpx
import jwt
import structlog

from al_go_mcp.errors import UpstreamError

if TYPE_CHECKING:
    from collections.abc import Callable

    from al_go_mcp.config import Settings

log = structlog.get_logger()

AuthMode = Literal["app", "token", "anonymous"]

# GitHub rejects app JWTs valid for more than 10 minutes.
_APP_JWT_LIFETIME_SECONDS = 540
_APP_JWT_BACKDATE_SECONDS = 60
_TOKEN_REFRESH_MARGIN_SECONDS = 60


@dataclass(frozen=True)
class AuthConfig:
    """Resolved credentials, passed by value into the GitHub transport."""

    mode: AuthMode
    token: str | None = field(default=None, repr=False)
    app_id: str | None = None
    private_key: str | None = field(default=None, repr=False)
    installation_id: str | None = None


def resolve_auth(settings: Settings) -> AuthConfig:
    """Pick the credential set to use for the lifetime of the process."""
    if settings.github_app_id and settings.github_private_key and settings.github_installation_id:
        log.info("github_auth_selected", mode="app", app_id=settings.github_app_id)
        return AuthConfig(
            mode="app",
            app_id=settings.github_app_id,
            # Keys pasted into a single-line env var arrive with literal "\n".
            private_key=settings.github_private_key.replace("\\n", "\n"),
            installation_id=settings.github_installation_id,
        )
    if settings.github_token:
        log.info("github_auth_selected", mode="token")
        return AuthConfig(mode="token", token=settings.github_token)
    log.warning("github_auth_selected", mode="anonymous", note="rate limited")
    return AuthConfig(mode="anonymous")


class InstallationTokenProvider:
    """Mints and caches installation access tokens for a GitHub App."""

    def __init__(
        self,
        auth: AuthConfig,
        http_client: httpx.AsyncClient,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if auth.mode != "app":
            raise ValueError("InstallationTokenProvider requires app credentials")
        self._auth = auth
        self._client = http_client
        self._clock = clock
        self._token: str | None = None
        self._expires_at: float = 0.0

    def app_jwt(self) -> str:
        now = int(self._clock())
        payload = {
            "iat": now - _APP_JWT_BACKDATE_SECONDS,
            "exp": now + _APP_JWT_LIFETIME_SECONDS,
            "iss": self._auth.app_id,
        }
        return jwt.encode(payload, self._auth.private_key, algorithm="RS256")

    async def token(self) -> str:
        if self._token and self._expires_at - self._clock() > _TOKEN_REFRESH_MARGIN_SECONDS:
            return self._token

        url = f"/app/installations/{self._auth.installation_id}/access_tokens"
        try:
            response = await self._client.post(
                url, headers={"Authorization": f"Bearer {self.app_jwt()}"}
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Failed to obtain GitHub App installation token: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(
                f"Failed to obtain GitHub App installation token: invalid JSON ({exc})"
            ) from exc
        if not isinstance(data, dict) or not data.get("token"):
            raise UpstreamError(
                "Failed to obtain GitHub App installation token: response has no token"
            )
        try:
            expires_at = _parse_expiry(data.get("expires_at"), self._clock())
        except ValueError as exc:
            raise UpstreamError(
                f"Failed to obtain GitHub App installation token: bad expires_at ({exc})"
            ) from exc

        self._token = data["token"]
        self._expires_at = expires_at
        log.debug("installation_token_refreshed", installation_id=self._auth.installation_id)
        return self._token


def _parse_expiry(expires_at: str | None, now: float) -> float:
    if not expires_at:
        # Installation tokens live for one hour.
        return now + 3600
    return datetime.fromisoformat(expires_at.replace("Z", "+00:00")).timestamp()
