"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (AL_GO_MCP__GITHUB__BRANCH=main)
  2. al-go-mcp.yaml         (searched in cwd, then ~/.config/al-go-mcp/)
  3. Hardcoded defaults

GitHub credentials are read from the conventional un-prefixed variables
(GITHUB_TOKEN, GITHUB_APP_ID, ...) so existing CI secrets work unchanged.
The config file is optional; every field has a default.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)


def _find_config_file() -> str | None:
    """Return the path of the first al-go-mcp.yaml found, or None."""
    candidates = [
        Path("al-go-mcp.yaml"),
        Path.home() / ".config" / "al-go-mcp" / "al-go-mcp.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class GitHubSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    owner: str = "microsoft"
    repo: str = "AL-Go"
    branch: str = "main"
    api_url: str = "https://api.github.com"
    user_agent: str = "al-go-mcp-server/1.0.0"
    timeout_seconds: float = 30.0
    max_documentation_files: int = Field(default=50, ge=1)
    max_retries: int = Field(default=3, ge=0)
    retry_base_delay: float = 0.5
    retry_max_delay: float = 8.0


class IndexSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ttl_seconds: int = Field(default=3600, ge=0)


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: AL_GO_MCP__INDEX__TTL_SECONDS=600
        env_prefix="AL_GO_MCP__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    github: GitHubSettings = GitHubSettings()
    index: IndexSettings = IndexSettings()
    logging: LoggingSettings = LoggingSettings()

    # Credentials bypass the prefix (aliases are matched verbatim).
    github_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("github_token", "al_go_mcp_github_token"),
    )
    github_app_id: str | None = Field(default=None, validation_alias="github_app_id")
    github_private_key: str | None = Field(default=None, validation_alias="github_private_key")
    github_installation_id: str | None = Field(
        default=None, validation_alias="github_installation_id"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # No dotenv or secrets-dir source.
        )
