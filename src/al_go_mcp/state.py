"""Composition root: every long-lived component, built once at startup."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from al_go_mcp.auth import resolve_auth
from al_go_mcp.client import AlGoClient
from al_go_mcp.github import GitHubAPI
from al_go_mcp.index import DocumentIndex

if TYPE_CHECKING:
    import httpx

    from al_go_mcp.config import Settings


@dataclass
class AppState:
    """Shared state handed to every request handler.

    Owned by the server's run loop; the HTTP client is closed on shutdown.
    """

    settings: Settings
    http_client: httpx.AsyncClient
    client: AlGoClient
    index: DocumentIndex


def create_app_state(settings: Settings, http_client: httpx.AsyncClient) -> AppState:
    api = GitHubAPI(http_client, settings.github, resolve_auth(settings))
    return AppState(
        settings=settings,
        http_client=http_client,
        client=AlGoClient(api, settings.github),
        index=DocumentIndex(ttl=timedelta(seconds=settings.index.ttl_seconds)),
    )
