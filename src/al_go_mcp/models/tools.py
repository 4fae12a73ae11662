from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator

WorkflowType = Literal["cicd", "deployment", "testing", "all"]
ProjectType = Literal["per-tenant-extension", "app-source", "template"]


class SearchDocsInput(BaseModel):
    query: str
    limit: int = 10

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("query must not be empty")
        if len(v) > 500:
            raise ValueError("query must not exceed 500 characters")
        return v

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("limit must be >= 1")
        return v


class GetWorkflowsInput(BaseModel):
    workflow_type: WorkflowType = Field(
        default="all", validation_alias=AliasChoices("workflowType", "workflow_type")
    )


class RefreshCacheInput(BaseModel):
    force: bool = False


class SetupPromptArgs(BaseModel):
    project_type: ProjectType = Field(
        validation_alias=AliasChoices("projectType", "project_type")
    )
    scenario: str | None = None
