"""Integration test fixtures.

The server runs as a real subprocess speaking MCP over stdio. Tests here must
not reach GitHub: they only exercise paths that fail or succeed locally.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from typing import Any

import pytest

PROTOCOL_VERSION = "2025-06-18"

_CREDENTIAL_VARS = (
    "GITHUB_TOKEN",
    "AL_GO_MCP_GITHUB_TOKEN",
    "GITHUB_APP_ID",
    "GITHUB_PRIVATE_KEY",
    "GITHUB_INSTALLATION_ID",
)


@pytest.fixture()
def subprocess_env(tmp_path) -> dict[str, str]:
    """Environment with credentials and prefixed settings stripped.

    cwd is moved to ``tmp_path`` by callers so a developer's al-go-mcp.yaml
    is never picked up.
    """
    env = {
        key: value
        for key, value in os.environ.items()
        if key not in _CREDENTIAL_VARS and not key.startswith("AL_GO_MCP__")
    }
    env["HOME"] = str(tmp_path)
    env["AL_GO_MCP__LOGGING__LEVEL"] = "WARNING"
    return env


def _run_session(
    messages: list[dict[str, Any]], env: dict[str, str], cwd: str, timeout: int = 10
) -> list[dict[str, Any]]:
    """Send ``messages`` after the initialize handshake; return every JSON-RPC response."""
    proc = subprocess.Popen(
        [sys.executable, "-m", "al_go_mcp.server"],
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        env=env,
        cwd=cwd,
    )
    assert proc.stdin is not None
    assert proc.stdout is not None
    assert proc.stderr is not None

    handshake = [
        {
            "jsonrpc": "2.0",
            "id": 0,
            "method": "initialize",
            "params": {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {},
                "clientInfo": {"name": "pytest", "version": "0"},
            },
        },
        {"jsonrpc": "2.0", "method": "notifications/initialized"},
    ]
    for message in handshake + messages:
        proc.stdin.write(json.dumps(message) + "\n")
    proc.stdin.close()

    stdout_lines = [line for line in proc.stdout.read().splitlines() if line.strip()]
    proc.stderr.read()  # Drain for clean process shutdown on all platforms
    proc.wait(timeout=timeout)
    proc.stdout.close()
    proc.stderr.close()

    return [json.loads(line) for line in stdout_lines]


@pytest.fixture()
def run_session(subprocess_env: dict[str, str], tmp_path):
    """Run one stdio session against a fresh server process."""

    def run(messages: list[dict[str, Any]]) -> dict[Any, dict[str, Any]]:
        responses = _run_session(messages, subprocess_env, str(tmp_path))
        return {response.get("id"): response for response in responses}

    return run
