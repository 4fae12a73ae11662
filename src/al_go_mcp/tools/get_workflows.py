"""get-al-go-workflows: workflow YAML from the repository, filtered by category."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp import types

from al_go_mcp.models.tools import GetWorkflowsInput
from al_go_mcp.tools.base import ToolSpec

if TYPE_CHECKING:
    from al_go_mcp.models.documents import WorkflowExample
    from al_go_mcp.state import AppState

DEFINITION = types.Tool(
    name="get-al-go-workflows",
    title="Get AL-Go Workflow Examples",
    description="Get examples of AL-Go GitHub workflows",
    inputSchema={
        "type": "object",
        "properties": {
            "workflowType": {
                "type": "string",
                "enum": ["cicd", "deployment", "testing", "all"],
                "default": "all",
                "description": "Type of workflows to retrieve",
            },
        },
    },
)


def format_workflows(workflow_type: str, workflows: list[WorkflowExample]) -> str:
    sections = [
        f"## {w.name}\n**Path:** {w.path}\n**Description:** {w.description}\n\n"
        f"```yaml\n{w.content}\n```\n"
        for w in workflows
    ]
    return f"AL-Go Workflow Examples ({workflow_type}):\n\n" + "\n---\n\n".join(sections)


async def handle(arguments: dict[str, Any], state: AppState) -> str:
    args = GetWorkflowsInput.model_validate(arguments)
    workflows = await state.client.get_workflow_examples(args.workflow_type)
    return format_workflows(args.workflow_type, workflows)


TOOL = ToolSpec(
    definition=DEFINITION,
    handler=handle,
    error_prefix="Error retrieving AL-Go workflows",
)
