"""MCP server entry point.

Wires ``AppState`` into a low-level ``mcp.server.Server`` and runs it over
stdio. stdout carries the protocol; all logging goes to stderr.

Usage:
    al-go-mcp              # serve over stdio
    al-go-mcp --version    # print version and exit
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import TYPE_CHECKING, Any
from urllib.parse import unquote

import click
import structlog
from mcp import types
from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from pydantic import ValidationError

from al_go_mcp import SERVER_NAME, __version__
from al_go_mcp.config import LoggingSettings, Settings
from al_go_mcp.errors import AlGoError, NotFoundError, ToolError
from al_go_mcp.github import build_http_client
from al_go_mcp.prompts import SETUP_PROMPT, render_setup_prompt
from al_go_mcp.state import AppState, create_app_state
from al_go_mcp.tools import TOOLS
from al_go_mcp.tools.server_version import version_info

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pydantic import AnyUrl

log = structlog.get_logger()

REPO_INFO_URI = "al-go://repo/info"
SERVER_VERSION_URI = "al-go://server/version"
DOCS_URI_PREFIX = "al-go://docs/"


def configure_logging(settings: LoggingSettings) -> None:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if settings.format == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping()[settings.level]
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def format_validation_error(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" if err["loc"] else err["msg"]
        for err in exc.errors()
    )


def create_server(state: AppState) -> Server:
    """Register every resource, tool and prompt handler against ``state``."""
    server: Server = Server(SERVER_NAME, version=__version__)

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    @server.list_resources()
    async def list_resources() -> list[types.Resource]:
        return [
            types.Resource(
                uri=REPO_INFO_URI,
                name="al-go-repo-info",
                title="AL-Go Repository Information",
                description="Basic information about the AL-Go repository",
                mimeType="application/json",
            ),
            types.Resource(
                uri=SERVER_VERSION_URI,
                name="al-go-server-version",
                title="AL-Go MCP Server Version",
                description="Version information about this MCP server",
                mimeType="application/json",
            ),
        ]

    @server.list_resource_templates()
    async def list_resource_templates() -> list[types.ResourceTemplate]:
        return [
            types.ResourceTemplate(
                uriTemplate=DOCS_URI_PREFIX + "{path}",
                name="al-go-doc",
                title="AL-Go Documentation File",
                description="Get content from a specific AL-Go documentation file",
                mimeType="text/markdown",
            )
        ]

    @server.read_resource()
    async def read_resource(uri: AnyUrl) -> Iterable[ReadResourceContents]:
        uri_str = str(uri)
        try:
            if uri_str == REPO_INFO_URI:
                info = await state.client.get_repository_info()
                return [ReadResourceContents(content=info.to_json(), mime_type="application/json")]
            if uri_str == SERVER_VERSION_URI:
                return [
                    ReadResourceContents(
                        content=json.dumps(version_info(), indent=2),
                        mime_type="application/json",
                    )
                ]
            if uri_str.startswith(DOCS_URI_PREFIX):
                path = unquote(uri_str.removeprefix(DOCS_URI_PREFIX))
                content = await state.client.get_document_content(path)
                return [ReadResourceContents(content=content, mime_type="text/markdown")]
        except NotFoundError as exc:
            raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message=exc.message)) from exc
        except AlGoError as exc:
            log.warning("resource_read_error", uri=uri_str, code=exc.code, error=exc.message)
            raise McpError(types.ErrorData(code=types.INTERNAL_ERROR, message=exc.message)) from exc

        raise McpError(
            types.ErrorData(code=types.INVALID_PARAMS, message=f"Unknown resource: {uri_str}")
        )

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [tool.definition for tool in TOOLS.values()]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
        tool = TOOLS.get(name)
        if tool is None:
            raise ToolError(f"Unknown tool: {name}")

        try:
            text = await tool.handler(arguments or {}, state)
        except ValidationError as exc:
            raise ToolError(f"Invalid input: {format_validation_error(exc)}") from exc
        except AlGoError as exc:
            log.warning("tool_error", tool=name, code=exc.code, error=exc.message)
            raise ToolError(f"{tool.error_prefix}: {exc.message}") from exc

        return [types.TextContent(type="text", text=text)]

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    @server.list_prompts()
    async def list_prompts() -> list[types.Prompt]:
        return [SETUP_PROMPT]

    @server.get_prompt()
    async def get_prompt(name: str, arguments: dict[str, str] | None) -> types.GetPromptResult:
        if name != SETUP_PROMPT.name:
            raise McpError(
                types.ErrorData(code=types.INVALID_PARAMS, message=f"Unknown prompt: {name}")
            )
        try:
            return render_setup_prompt(arguments)
        except ValidationError as exc:
            raise McpError(
                types.ErrorData(
                    code=types.INVALID_PARAMS,
                    message=f"Invalid prompt arguments: {format_validation_error(exc)}",
                )
            ) from exc

    return server


async def run(settings: Settings) -> None:
    async with build_http_client(settings.github) as http_client:
        state = create_app_state(settings, http_client)
        server = create_server(state)
        log.info("server_starting", transport="stdio", version=__version__)
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    log.info("server_stopped")


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(
    __version__, "-v", "--version", prog_name=SERVER_NAME, message="%(prog)s %(version)s"
)
def main() -> None:
    """Serve AL-Go for GitHub documentation to MCP clients over stdio.

    \b
    Environment:
      GITHUB_TOKEN                 personal access token
      GITHUB_APP_ID, GITHUB_PRIVATE_KEY, GITHUB_INSTALLATION_ID
                                   GitHub App credentials (take precedence)
      AL_GO_MCP__...               any setting, e.g. AL_GO_MCP__LOGGING__LEVEL=DEBUG
    """
    try:
        settings = Settings()
    except ValidationError as exc:
        click.echo(f"Invalid configuration: {format_validation_error(exc)}", err=True)
        sys.exit(2)
    configure_logging(settings.logging)
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        log.info("server_interrupted")
    except Exception:
        log.exception("server_failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
