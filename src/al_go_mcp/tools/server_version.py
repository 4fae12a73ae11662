"""get-al-go-server-version: static metadata about this server."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp import types

from al_go_mcp import SERVER_AUTHOR, SERVER_DESCRIPTION, SERVER_NAME, __version__
from al_go_mcp.tools.base import ToolSpec

if TYPE_CHECKING:
    from al_go_mcp.state import AppState

DEFINITION = types.Tool(
    name="get-al-go-server-version",
    title="Get AL-Go MCP Server Version",
    description="Get version information about this AL-Go MCP server",
    inputSchema={"type": "object", "properties": {}},
)


def version_info() -> dict[str, str]:
    return {
        "name": SERVER_NAME,
        "version": __version__,
        "description": SERVER_DESCRIPTION,
        "author": SERVER_AUTHOR,
    }


async def handle(arguments: dict[str, Any], state: AppState) -> str:
    return (
        f"{SERVER_NAME} v{__version__}\n"
        f"Author: {SERVER_AUTHOR}\n"
        f"Description: {SERVER_DESCRIPTION}\n"
        f"Repository: {state.client.repository_url}"
    )


TOOL = ToolSpec(
    definition=DEFINITION,
    handler=handle,
    error_prefix="Error retrieving server version",
)
