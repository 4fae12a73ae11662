from __future__ import annotations

from al_go_mcp.models.documents import DocumentEntry, DocumentFile, SearchResult, WorkflowExample
from al_go_mcp.models.repository import RepositoryInfo
from al_go_mcp.models.tools import (
    GetWorkflowsInput,
    ProjectType,
    RefreshCacheInput,
    SearchDocsInput,
    SetupPromptArgs,
    WorkflowType,
)

__all__ = [
    # repository
    "RepositoryInfo",
    # documents
    "DocumentFile",
    "DocumentEntry",
    "WorkflowExample",
    "SearchResult",
    # tools
    "SearchDocsInput",
    "GetWorkflowsInput",
    "RefreshCacheInput",
    "SetupPromptArgs",
    "WorkflowType",
    "ProjectType",
]
