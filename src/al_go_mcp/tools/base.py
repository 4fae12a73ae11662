from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from mcp import types

    from al_go_mcp.state import AppState


@dataclass(frozen=True)
class ToolSpec:
    """An MCP tool: its advertised definition plus the coroutine that runs it.

    ``error_prefix`` is prepended to domain error messages before they are
    returned to the caller as an error result.
    """

    definition: types.Tool
    handler: Callable[[dict[str, Any], AppState], Awaitable[str]]
    error_prefix: str

    @property
    def name(self) -> str:
        return self.definition.name
