"""MCP server exposing Microsoft AL-Go documentation and workflow examples."""

from __future__ import annotations

__version__ = "1.0.0"

SERVER_NAME = "al-go-mcp-server"
SERVER_DESCRIPTION = (
    "MCP server providing access to AL-Go for GitHub documentation, "
    "workflow examples and setup guidance for Business Central projects"
)
SERVER_AUTHOR = "AL-Go MCP Server contributors"
