"""al-go-setup-help: templated guidance for setting up an AL-Go project."""

from __future__ import annotations

from mcp import types

from al_go_mcp.models.tools import SetupPromptArgs

SETUP_PROMPT = types.Prompt(
    name="al-go-setup-help",
    title="AL-Go Project Setup Help",
    description="Get help with setting up AL-Go for Business Central projects",
    arguments=[
        types.PromptArgument(
            name="projectType",
            description="Type of AL-Go project (per-tenant-extension, app-source, template)",
            required=True,
        ),
        types.PromptArgument(
            name="scenario",
            description="Specific scenario or requirement",
            required=False,
        ),
    ],
)

_TEMPLATE = """\
You are an expert in AL-Go for GitHub, Microsoft's development framework for \
Business Central extensions. Help the user set up an AL-Go project.

Project Type: {project_type}
{scenario_line}
Please provide step-by-step guidance including:
1. Repository setup and structure
2. Required configuration files
3. Workflow configuration
4. Best practices and common pitfalls

Use the AL-Go documentation and examples available through the MCP tools to \
provide accurate, up-to-date information."""


def render_setup_prompt(arguments: dict[str, str] | None) -> types.GetPromptResult:
    args = SetupPromptArgs.model_validate(arguments or {})
    text = _TEMPLATE.format(
        project_type=args.project_type,
        scenario_line=f"Scenario: {args.scenario}\n" if args.scenario else "",
    )
    return types.GetPromptResult(
        description=SETUP_PROMPT.description,
        messages=[
            types.PromptMessage(
                role="user",
                content=types.TextContent(type="text", text=text),
            )
        ],
    )
