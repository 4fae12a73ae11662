"""In-memory AL-Go documentation index with heuristic relevance search.

The index is a single list of ``DocumentEntry`` replaced wholesale on every
refresh; there is no per-document invalidation and no persistence. Readers
take the list reference once per call, so a concurrent refresh never exposes
a half-built set (last writer wins).
"""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from al_go_mcp.errors import AlGoError, IndexInitError
from al_go_mcp.models.documents import DocumentEntry, SearchResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from al_go_mcp.client import AlGoClient

log = structlog.get_logger()

DEFAULT_TTL = timedelta(hours=1)
EXCERPT_MAX_LENGTH = 200
EXCERPT_LEAD = 50
MIN_WORD_LENGTH = 3

DOMAIN_TERMS = ("al-go", "business central", "workflow", "actions", "templates", "devops")

_HEADING = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_FRONT_MATTER_TITLE = re.compile(r"^---\s*\n.*?title:\s*(.+?)\s*\n.*?---", re.DOTALL)
_EXTENSION = re.compile(r"\.[^/.]+$")
_NEWLINES = re.compile(r"\n+")


def extract_title(content: str, fallback_name: str) -> str:
    """First ``# Heading``, else front-matter ``title:``, else the file stem."""
    heading = _HEADING.search(content)
    if heading:
        return heading.group(1).strip()

    front_matter = _FRONT_MATTER_TITLE.search(content)
    if front_matter:
        return front_matter.group(1).strip()

    return _EXTENSION.sub("", fallback_name)


def _query_words(lower_query: str) -> list[str]:
    return [word for word in lower_query.split() if len(word) >= MIN_WORD_LENGTH]


def relevance_score(doc: DocumentEntry, lower_query: str) -> float:
    score = 0.0
    lower_content = doc.content.lower()

    if lower_query in doc.title.lower():
        score += 10
    if lower_query in doc.path.lower():
        score += 5

    for word in _query_words(lower_query):
        escaped = re.escape(word)
        score += len(re.findall(rf"\b{escaped}\b", lower_content)) * 0.5
        headings = re.findall(rf"^#+.*{escaped}.*$", lower_content, re.MULTILINE)
        score += len(headings) * 2

    for term in DOMAIN_TERMS:
        if term in lower_query and term in lower_content:
            score += 1

    return score


def extract_excerpt(content: str, lower_query: str, max_length: int = EXCERPT_MAX_LENGTH) -> str:
    lower_content = content.lower()
    positions = [
        index
        for word in _query_words(lower_query)
        if (index := lower_content.find(word)) != -1
    ]

    if not positions:
        excerpt = content[:max_length].strip()
        return excerpt + "..." if len(content) > max_length else excerpt

    start = max(0, min(positions) - EXCERPT_LEAD)
    end = min(len(content), start + max_length)
    excerpt = _NEWLINES.sub(" ", content[start:end]).strip()

    if start > 0:
        excerpt = "..." + excerpt
    if end < len(content):
        excerpt = excerpt + "..."
    return excerpt


class DocumentIndex:
    """Time-boxed snapshot of the repository's documentation files."""

    def __init__(
        self,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._documents: list[DocumentEntry] = []
        self._initialized = False
        self._last_refresh: datetime | None = None

    @property
    def documents(self) -> list[DocumentEntry]:
        return self._documents

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def last_refresh(self) -> datetime | None:
        return self._last_refresh

    def is_stale(self) -> bool:
        if self._last_refresh is None:
            return True
        return self._clock() - self._last_refresh > self._ttl

    async def initialize(self, client: AlGoClient) -> None:
        if self._initialized and not self.is_stale():
            return

        log.info("index_initializing")
        try:
            files = await client.get_documentation_files()
        except AlGoError as exc:
            log.error("index_init_failed", error=str(exc))
            raise IndexInitError(f"Failed to initialize document index: {exc}") from exc

        now = self._clock()
        self._documents = [
            DocumentEntry(
                path=f.path,
                content=f.content,
                name=f.name,
                title=extract_title(f.content, f.name),
                last_indexed=now,
            )
            for f in files
        ]
        self._initialized = True
        self._last_refresh = now
        log.info("index_initialized", documents=len(self._documents))

    async def refresh(self, client: AlGoClient, force: bool = False) -> bool:
        """Re-fetch when forced or stale. Returns True if a re-fetch happened."""
        if not (force or self.is_stale()):
            log.debug("index_refresh_skipped", last_refresh=str(self._last_refresh))
            return False
        self._initialized = False
        await self.initialize(client)
        return True

    def search(self, query: str, limit: int = 10) -> list[SearchResult]:
        documents = self._documents
        lower_query = query.lower().strip()

        scored = [(relevance_score(doc, lower_query), doc) for doc in documents]
        scored = [(score, doc) for score, doc in scored if score > 0]
        scored.sort(key=lambda pair: pair[0], reverse=True)

        return [
            SearchResult(
                title=doc.title,
                path=doc.path,
                excerpt=extract_excerpt(doc.content, lower_query),
                score=score,
                content=doc.content,
            )
            for score, doc in scored[:limit]
        ]
