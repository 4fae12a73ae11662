"""Unit-specific fixtures (no I/O beyond respx-mocked HTTP)."""

from __future__ import annotations

import base64
from typing import Any

import pytest

from al_go_mcp.auth import AuthConfig
from al_go_mcp.client import AlGoClient
from al_go_mcp.config import GitHubSettings, Settings
from al_go_mcp.github import GitHubAPI, build_http_client
from al_go_mcp.index import DocumentIndex
from al_go_mcp.state import AppState

API = "https://api.github.com"
REPO = f"{API}/repos/microsoft/AL-Go"


def _file_payload(content: str, path: str = "README.md") -> dict[str, Any]:
    encoded = base64.b64encode(content.encode("utf-8")).decode("ascii")
    # Mimic GitHub's 60-column line wrapping of base64 content.
    wrapped = "\n".join(encoded[i : i + 60] for i in range(0, len(encoded), 60))
    return {"type": "file", "path": path, "encoding": "base64", "content": wrapped}


@pytest.fixture()
def file_payload():
    """Build a contents-API response body for a file."""
    return _file_payload


@pytest.fixture()
def github_settings() -> GitHubSettings:
    # Zero delays keep retry tests instantaneous.
    return GitHubSettings(max_retries=2, retry_base_delay=0, retry_max_delay=0)


@pytest.fixture()
async def http_client(github_settings: GitHubSettings):
    async with build_http_client(github_settings) as client:
        yield client


@pytest.fixture()
def api(http_client, github_settings: GitHubSettings) -> GitHubAPI:
    return GitHubAPI(http_client, github_settings, AuthConfig(mode="token", token="test-token"))


@pytest.fixture()
def client(api: GitHubAPI, github_settings: GitHubSettings) -> AlGoClient:
    return AlGoClient(api, github_settings)


@pytest.fixture()
def app_state(http_client, client: AlGoClient, github_settings: GitHubSettings) -> AppState:
    return AppState(
        settings=Settings(github=github_settings),
        http_client=http_client,
        client=client,
        index=DocumentIndex(),
    )
