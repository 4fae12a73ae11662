"""search-al-go-docs: ranked keyword search over the documentation index."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp import types

from al_go_mcp.models.tools import SearchDocsInput
from al_go_mcp.tools.base import ToolSpec

if TYPE_CHECKING:
    from al_go_mcp.models.documents import SearchResult
    from al_go_mcp.state import AppState

DEFINITION = types.Tool(
    name="search-al-go-docs",
    title="Search AL-Go Documentation",
    description="Search through AL-Go documentation for specific queries",
    inputSchema={
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "Search query for AL-Go documentation",
            },
            "limit": {
                "type": "number",
                "default": 10,
                "description": "Maximum number of results to return",
            },
        },
        "required": ["query"],
    },
)


def format_results(query: str, results: list[SearchResult]) -> str:
    if not results:
        return f'No AL-Go documentation matched "{query}".'
    blocks = [
        f"{i}. **{r.title}** ({r.path})\n   {r.excerpt}\n   Score: {r.score:.2f}\n"
        for i, r in enumerate(results, 1)
    ]
    return f'Found {len(results)} results for "{query}":\n\n' + "\n".join(blocks)


async def handle(arguments: dict[str, Any], state: AppState) -> str:
    args = SearchDocsInput.model_validate(arguments)
    # No-op while the index is fresh; (re)builds it on first use or once stale.
    await state.index.initialize(state.client)
    return format_results(args.query, state.index.search(args.query, args.limit))


TOOL = ToolSpec(
    definition=DEFINITION,
    handler=handle,
    error_prefix="Error searching AL-Go documentation",
)
