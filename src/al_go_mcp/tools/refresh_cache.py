"""refresh-al-go-cache: rebuild the documentation index when stale or forced."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp import types

from al_go_mcp.models.tools import RefreshCacheInput
from al_go_mcp.tools.base import ToolSpec

if TYPE_CHECKING:
    from al_go_mcp.state import AppState

DEFINITION = types.Tool(
    name="refresh-al-go-cache",
    title="Refresh AL-Go Documentation Cache",
    description="Refresh the cached AL-Go documentation from the repository",
    inputSchema={
        "type": "object",
        "properties": {
            "force": {
                "type": "boolean",
                "default": False,
                "description": "Force refresh even if cache is recent",
            },
        },
    },
)


async def handle(arguments: dict[str, Any], state: AppState) -> str:
    args = RefreshCacheInput.model_validate(arguments)
    refreshed = await state.index.refresh(state.client, force=args.force)
    if not refreshed:
        return (
            "AL-Go documentation cache is up to date "
            f"(last refreshed {state.index.last_refresh:%Y-%m-%d %H:%M:%S} UTC). "
            "Use force=true to refresh anyway."
        )
    return (
        "AL-Go documentation cache refreshed successfully "
        f"({len(state.index.documents)} documents indexed)."
    )


TOOL = ToolSpec(
    definition=DEFINITION,
    handler=handle,
    error_prefix="Error refreshing AL-Go cache",
)
