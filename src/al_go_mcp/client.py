"""AL-Go repository client.

Translates documentation requests into GitHub REST calls against a single
repository and normalizes the responses. Bulk operations (documentation
files, workflow files) tolerate per-file failures: the file is logged and
skipped, the rest of the batch is still returned.
"""

from __future__ import annotations

import base64
import re
from typing import TYPE_CHECKING, Any

import structlog

from al_go_mcp.errors import AlGoError, NotFoundError, UpstreamError
from al_go_mcp.github import encode_path
from al_go_mcp.models.documents import DocumentFile, WorkflowExample
from al_go_mcp.models.repository import RepositoryInfo

if TYPE_CHECKING:
    from al_go_mcp.config import GitHubSettings
    from al_go_mcp.github import GitHubAPI

log = structlog.get_logger()

DOC_SUFFIXES = (".md", ".txt")
DOC_DIRECTORY_MARKERS = ("Actions/", "Scenarios/", "Workshop/", "Documentation/")
DOC_EXACT_PATHS = frozenset({"README.md", "RELEASENOTES.md"})

WORKFLOWS_DIR = ".github/workflows"
WORKFLOW_SUFFIXES = (".yml", ".yaml")
DEFAULT_WORKFLOW_DESCRIPTION = "AL-Go workflow"

_COMMENT_LINE = re.compile(r"^#\s*(.+)$", re.MULTILINE)


def is_documentation_path(path: str) -> bool:
    return (
        path.endswith(DOC_SUFFIXES)
        or any(marker in path for marker in DOC_DIRECTORY_MARKERS)
        or path in DOC_EXACT_PATHS
    )


def select_documentation_paths(tree: list[dict[str, Any]], limit: int) -> list[str]:
    """Blob paths from a git tree listing that look like documentation, in tree order."""
    paths = [
        item["path"]
        for item in tree
        if item.get("type") == "blob" and item.get("path") and is_documentation_path(item["path"])
    ]
    return paths[:limit]


def extract_workflow_description(content: str) -> str:
    match = _COMMENT_LINE.search(content)
    return match.group(1) if match else DEFAULT_WORKFLOW_DESCRIPTION


def matches_workflow_type(file_name: str, content: str, workflow_type: str) -> bool:
    """Keyword heuristics classifying a workflow file. Unknown types match everything."""
    name = file_name.lower()
    text = content.lower()

    if workflow_type == "cicd":
        return (
            "cicd" in name
            or "ci" in name
            or "continuous integration" in text
            or "build and test" in text
        )
    if workflow_type == "deployment":
        return "deploy" in name or "release" in name or "deployment" in text or "publish" in text
    if workflow_type == "testing":
        return "test" in name or "test" in text or "validation" in text
    return True


def decode_content(encoded: str) -> str:
    # The contents API wraps base64 at 60 columns.
    try:
        raw = base64.b64decode(encoded, validate=False)
    except ValueError as exc:
        raise UpstreamError(f"Invalid base64 content: {exc}") from exc
    return raw.decode("utf-8", errors="replace")


def check_document_path(path: str) -> str:
    """Return ``path`` without surrounding slashes, or raise ``NotFoundError``.

    Dot and empty segments are refused: the request must stay under the
    repository's contents endpoint.
    """
    cleaned = path.strip("/")
    segments = cleaned.split("/")
    if not cleaned or any(segment in ("", ".", "..") for segment in segments):
        raise NotFoundError(f"Invalid document path: {path}")
    return cleaned


class AlGoClient:
    """Read-only access to the AL-Go repository's docs and workflows."""

    def __init__(self, api: GitHubAPI, settings: GitHubSettings) -> None:
        self._api = api
        self._settings = settings
        self._repo_path = f"/repos/{settings.owner}/{settings.repo}"

    @property
    def repository_url(self) -> str:
        return f"https://github.com/{self._settings.owner}/{self._settings.repo}"

    async def get_repository_info(self) -> RepositoryInfo:
        try:
            data = await self._api.get_json(self._repo_path)
        except AlGoError as exc:
            log.error("repository_info_error", error=exc.message)
            raise UpstreamError(
                f"Failed to fetch AL-Go repository information: {exc.message}",
                status_code=exc.status_code,
            ) from exc
        return RepositoryInfo.from_api(data)

    async def get_document_content(self, path: str) -> str:
        """Return the decoded text of a single file.

        Raises:
            NotFoundError: the path is malformed, a directory, empty, or missing.
            UpstreamError: any other GitHub failure, or an undecodable body.
        """
        try:
            relative = check_document_path(path)
            data = await self._api.get_json(f"{self._repo_path}/contents/{encode_path(relative)}")
        except NotFoundError as exc:
            raise NotFoundError(f"Failed to fetch document {path}: {exc.message}") from exc
        except AlGoError as exc:
            raise UpstreamError(
                f"Failed to fetch document {path}: {exc.message}", status_code=exc.status_code
            ) from exc

        if not isinstance(data, dict) or not data.get("content"):
            raise NotFoundError(
                f"Failed to fetch document {path}: File content not found or is a directory"
            )
        try:
            return decode_content(data["content"])
        except UpstreamError as exc:
            raise UpstreamError(f"Failed to fetch document {path}: {exc.message}") from exc

    async def get_documentation_files(self) -> list[DocumentFile]:
        try:
            tree = await self._api.get_json(
                f"{self._repo_path}/git/trees/{self._settings.branch}",
                params={"recursive": "1"},
            )
        except AlGoError as exc:
            log.error("documentation_tree_error", error=exc.message)
            raise UpstreamError(
                f"Failed to fetch documentation files: {exc.message}",
                status_code=exc.status_code,
            ) from exc

        items = tree.get("tree", []) if isinstance(tree, dict) else []
        paths = select_documentation_paths(items, self._settings.max_documentation_files)
        docs: list[DocumentFile] = []
        for path in paths:
            try:
                content = await self.get_document_content(path)
            except AlGoError as exc:
                log.warning("documentation_file_skipped", path=path, error=exc.message)
                continue
            docs.append(DocumentFile(path=path, content=content, name=path.rsplit("/", 1)[-1]))

        log.info("documentation_files_fetched", selected=len(paths), fetched=len(docs))
        return docs

    async def get_workflow_examples(self, workflow_type: str = "all") -> list[WorkflowExample]:
        try:
            listing = await self._api.get_json(f"{self._repo_path}/contents/{WORKFLOWS_DIR}")
        except AlGoError as exc:
            log.error("workflow_listing_error", error=exc.message)
            raise UpstreamError(
                f"Failed to fetch workflow examples: {exc.message}",
                status_code=exc.status_code,
            ) from exc

        if not isinstance(listing, list):
            return []

        workflows: list[WorkflowExample] = []
        for item in listing:
            name = item.get("name", "")
            if item.get("type") != "file" or not name.endswith(WORKFLOW_SUFFIXES):
                continue
            try:
                content = await self.get_document_content(item["path"])
            except AlGoError as exc:
                log.warning("workflow_file_skipped", path=item["path"], error=exc.message)
                continue

            if workflow_type != "all" and not matches_workflow_type(name, content, workflow_type):
                continue
            workflows.append(
                WorkflowExample(
                    name=name,
                    path=item["path"],
                    content=content,
                    description=extract_workflow_description(content),
                )
            )
        return workflows
