"""GitHub REST transport.

Wraps a shared ``httpx.AsyncClient`` with authentication, error mapping and a
bounded retry policy. Every failure that leaves this module is an
``AlGoError`` subclass:

- 404                                  → ``NotFoundError``
- 403 with exhausted rate limit        → ``UpstreamError`` (not retried)
- 408/429/5xx and transport errors     → retried, then ``UpstreamError``
- any other non-2xx                    → ``UpstreamError``
"""

from __future__ import annotations

import asyncio
import random
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx
import structlog

from al_go_mcp.auth import InstallationTokenProvider
from al_go_mcp.errors import NotFoundError, UpstreamError

if TYPE_CHECKING:
    from al_go_mcp.auth import AuthConfig
    from al_go_mcp.config import GitHubSettings

log = structlog.get_logger()

_RETRYABLE_STATUS = frozenset({408, 429, 500, 502, 503, 504})


def build_http_client(settings: GitHubSettings) -> httpx.AsyncClient:
    """Create the shared HTTP client used for every GitHub call."""
    return httpx.AsyncClient(
        base_url=settings.api_url,
        timeout=httpx.Timeout(settings.timeout_seconds),
        follow_redirects=True,
        headers={
            "Accept": "application/vnd.github+json",
            "User-Agent": settings.user_agent,
            "X-GitHub-Api-Version": "2022-11-28",
        },
    )


def encode_path(path: str) -> str:
    return quote(path.strip("/"), safe="/")


class GitHubAPI:
    """Authenticated GET access to the GitHub REST API."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: GitHubSettings,
        auth: AuthConfig,
    ) -> None:
        self._client = http_client
        self._settings = settings
        self._auth = auth
        self._installation_tokens = (
            InstallationTokenProvider(auth, http_client) if auth.mode == "app" else None
        )

    async def _auth_headers(self) -> dict[str, str]:
        if self._installation_tokens is not None:
            return {"Authorization": f"Bearer {await self._installation_tokens.token()}"}
        if self._auth.token:
            return {"Authorization": f"Bearer {self._auth.token}"}
        return {}

    def _retry_delay(self, attempt: int, response: httpx.Response | None = None) -> float:
        """Exponential backoff with jitter, honouring Retry-After when present."""
        max_delay = self._settings.retry_max_delay
        if response is not None:
            retry_after = response.headers.get("retry-after", "")
            if retry_after.isdigit():
                return min(float(retry_after), max_delay)
        base = self._settings.retry_base_delay * (2**attempt)
        jitter = random.uniform(0, self._settings.retry_base_delay)
        return min(base + jitter, max_delay)

    async def get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        """GET ``path`` (relative to the API root) and return the decoded JSON body."""
        headers = await self._auth_headers()
        max_retries = self._settings.max_retries
        attempt = 0

        while True:
            try:
                response = await self._client.get(path, params=params, headers=headers)
            except httpx.TransportError as exc:
                if attempt >= max_retries:
                    raise UpstreamError(f"{type(exc).__name__}: {exc}") from exc
                delay = self._retry_delay(attempt)
                log.warning(
                    "github_request_retry",
                    path=path,
                    error=str(exc),
                    attempt=attempt + 1,
                    delay=round(delay, 2),
                )
            else:
                if response.status_code not in _RETRYABLE_STATUS or attempt >= max_retries:
                    return self._handle_response(path, response)
                delay = self._retry_delay(attempt, response)
                log.warning(
                    "github_request_retry",
                    path=path,
                    status=response.status_code,
                    attempt=attempt + 1,
                    delay=round(delay, 2),
                )

            await asyncio.sleep(delay)
            attempt += 1

    def _handle_response(self, path: str, response: httpx.Response) -> Any:
        status = response.status_code
        if status < 400:
            try:
                return response.json()
            except ValueError as exc:
                raise UpstreamError(
                    f"{path}: invalid JSON in HTTP {status} response", status_code=status
                ) from exc

        message = _upstream_message(response)
        if status == 404:
            raise NotFoundError(f"{path}: {message}", status_code=status)
        if status in (403, 429) and response.headers.get("x-ratelimit-remaining") == "0":
            reset = response.headers.get("x-ratelimit-reset", "unknown")
            raise UpstreamError(
                f"GitHub API rate limit exceeded (resets at {reset}): {message}",
                status_code=status,
            )
        raise UpstreamError(f"HTTP {status}: {message}", status_code=status)


def _upstream_message(response: httpx.Response) -> str:
    """GitHub error bodies are ``{"message": ...}``; fall back to the reason phrase."""
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or "Unknown error"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase or "Unknown error"
