"""MCP tool registry."""

from __future__ import annotations

from al_go_mcp.tools import get_workflows, refresh_cache, search_docs, server_version
from al_go_mcp.tools.base import ToolSpec

TOOLS: dict[str, ToolSpec] = {
    tool.name: tool
    for tool in (
        search_docs.TOOL,
        get_workflows.TOOL,
        refresh_cache.TOOL,
        server_version.TOOL,
    )
}

__all__ = ["TOOLS", "ToolSpec"]
