from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RepositoryInfo(BaseModel):
    """Snapshot of ``GET /repos/{owner}/{repo}`` at fetch time."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str | None = None
    stars: int = 0
    forks: int = 0
    language: str | None = None
    last_updated: str | None = Field(default=None, serialization_alias="lastUpdated")
    default_branch: str | None = Field(default=None, serialization_alias="defaultBranch")
    url: str | None = None
    topics: list[str] = []

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> RepositoryInfo:
        return cls(
            name=data["name"],
            description=data.get("description"),
            stars=data.get("stargazers_count", 0),
            forks=data.get("forks_count", 0),
            language=data.get("language"),
            last_updated=data.get("updated_at"),
            default_branch=data.get("default_branch"),
            url=data.get("html_url"),
            topics=data.get("topics") or [],
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)
