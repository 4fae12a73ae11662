"""Unit tests for al_go_mcp.index."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from al_go_mcp.errors import IndexInitError, UpstreamError
from al_go_mcp.index import DocumentIndex, extract_excerpt, extract_title, relevance_score
from al_go_mcp.models.documents import DocumentEntry, DocumentFile

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


class FakeClient:
    """Stands in for AlGoClient; only the bulk documentation fetch is used."""

    def __init__(self, files: list[DocumentFile] | None = None, error: Exception | None = None):
        self.files = files or []
        self.error = error
        self.calls = 0

    async def get_documentation_files(self) -> list[DocumentFile]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.files)


class FakeClock:
    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def _entry(path: str, content: str, title: str | None = None) -> DocumentEntry:
    name = path.rsplit("/", 1)[-1]
    return DocumentEntry(
        path=path,
        content=content,
        name=name,
        title=title if title is not None else extract_title(content, name),
        last_indexed=T0,
    )


# ---------------------------------------------------------------------------
# extract_title
# ---------------------------------------------------------------------------


class TestExtractTitle:
    def test_first_heading(self) -> None:
        content = "intro text\n# Workflow Setup  \n## Details\n# Second"
        assert extract_title(content, "setup.md") == "Workflow Setup"

    def test_front_matter_title(self) -> None:
        content = "---\nlayout: page\ntitle: Continuous Delivery\n---\nBody without headings"
        assert extract_title(content, "cd.md") == "Continuous Delivery"

    def test_filename_without_extension(self) -> None:
        assert extract_title("plain text only", "RELEASENOTES.md") == "RELEASENOTES"

    def test_subheading_is_not_a_title(self) -> None:
        assert extract_title("## Only level two", "notes.txt") == "notes"

    def test_only_last_extension_stripped(self) -> None:
        assert extract_title("", "archive.tar.gz") == "archive.tar"


# ---------------------------------------------------------------------------
# relevance_score
# ---------------------------------------------------------------------------


class TestRelevanceScore:
    def test_title_match_contributes_ten(self) -> None:
        doc = _entry("docs/setup.md", "nothing relevant here", title="Workflow Setup")
        # Title +10; no path match; "workflow" absent from content.
        assert relevance_score(doc, "workflow") == 10

    def test_path_match_contributes_five(self) -> None:
        doc = _entry("Scenarios/UpdateAlGoSystemFiles.md", "body", title="Update")
        assert relevance_score(doc, "scenarios") == 5

    def test_word_and_heading_bonuses(self) -> None:
        content = "# Settings\nThe settings file.\nMore settings."
        doc = _entry("a.md", content, title="Other")
        # 3 whole-word matches * 0.5 + 1 heading line * 2
        assert relevance_score(doc, "settings") == pytest.approx(3.5)

    def test_short_words_ignored(self) -> None:
        doc = _entry("a.md", "an al an al", title="x")
        assert relevance_score(doc, "an al") == 0

    def test_whole_word_matching(self) -> None:
        doc = _entry("a.md", "testing tests test", title="x")
        assert relevance_score(doc, "test") == pytest.approx(0.5)

    def test_domain_term_bonus(self) -> None:
        doc = _entry("a.md", "Use AL-Go with Business Central", title="x")
        score = relevance_score(doc, "business central")
        # "business" and "central" each match once (0.5 + 0.5) plus the domain term bonus.
        assert score == pytest.approx(2.0)

    def test_regex_characters_in_query_are_literal(self) -> None:
        doc = _entry("a.md", "see c++ docs", title="x")
        # "c++" has no word boundary after "+", so only literal matching applies.
        assert relevance_score(doc, "c++") == 0
        # An unescaped "(docs" is an unbalanced group and would fail to compile.
        assert relevance_score(doc, "(docs") == 0

    def test_regex_characters_match_literally_in_headings(self) -> None:
        doc = _entry("a.md", "# Using c++ builds\nbody", title="x")
        assert relevance_score(doc, "c++") == pytest.approx(2.0)


# ---------------------------------------------------------------------------
# extract_excerpt
# ---------------------------------------------------------------------------


class TestExtractExcerpt:
    def test_mid_document_match_has_both_ellipses(self) -> None:
        content = ("lorem ipsum " * 30) + "the workflow\nruns here " + ("dolor sit " * 40)
        excerpt = extract_excerpt(content, "workflow")
        assert excerpt.startswith("...")
        assert excerpt.endswith("...")
        assert "workflow" in excerpt
        assert "\n" not in excerpt
        assert len(excerpt) <= 200 + 6

    def test_match_near_start_has_no_leading_ellipsis(self) -> None:
        content = "workflow " + "x" * 500
        excerpt = extract_excerpt(content, "workflow")
        assert not excerpt.startswith("...")
        assert excerpt.endswith("...")

    def test_short_document_has_no_ellipsis(self) -> None:
        assert extract_excerpt("A short workflow note", "workflow") == "A short workflow note"

    def test_no_match_returns_document_start(self) -> None:
        content = "a" * 300
        assert extract_excerpt(content, "zzz") == "a" * 200 + "..."

    def test_earliest_word_wins(self) -> None:
        content = "alpha " * 20 + "beta " + "gamma " * 50
        excerpt = extract_excerpt(content, "gamma beta")
        # Window opens 50 characters before "beta", inside the alpha run.
        assert excerpt.startswith("...")
        assert "alpha beta gamma" in excerpt


# ---------------------------------------------------------------------------
# DocumentIndex lifecycle
# ---------------------------------------------------------------------------


FILES = [
    DocumentFile(
        path="README.md", content="# AL-Go for GitHub\nWorkflow overview", name="README.md"
    ),
    DocumentFile(path="Scenarios/setup.md", content="Setup steps", name="setup.md"),
]


class TestInitialize:
    async def test_builds_entries_with_titles(self) -> None:
        clock = FakeClock()
        index = DocumentIndex(clock=clock)
        await index.initialize(FakeClient(FILES))

        assert index.initialized
        assert index.last_refresh == T0
        assert [d.title for d in index.documents] == ["AL-Go for GitHub", "setup"]
        assert all(d.last_indexed == T0 for d in index.documents)

    async def test_noop_while_fresh(self) -> None:
        clock = FakeClock()
        client = FakeClient(FILES)
        index = DocumentIndex(clock=clock)
        await index.initialize(client)
        clock.advance(minutes=59)
        await index.initialize(client)
        assert client.calls == 1

    async def test_reinitializes_when_stale(self) -> None:
        clock = FakeClock()
        client = FakeClient(FILES)
        index = DocumentIndex(clock=clock)
        await index.initialize(client)
        clock.advance(hours=1, seconds=1)
        await index.initialize(client)
        assert client.calls == 2

    async def test_failure_raises_index_init_error(self) -> None:
        index = DocumentIndex(clock=FakeClock())
        with pytest.raises(IndexInitError) as exc_info:
            await index.initialize(FakeClient(error=UpstreamError("HTTP 502: Bad Gateway")))
        assert "Bad Gateway" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, UpstreamError)
        assert not index.initialized

    async def test_failed_refresh_keeps_previous_documents(self) -> None:
        clock = FakeClock()
        index = DocumentIndex(clock=clock)
        await index.initialize(FakeClient(FILES))
        with pytest.raises(IndexInitError):
            await index.refresh(FakeClient(error=UpstreamError("boom")), force=True)
        assert len(index.documents) == 2


class TestRefresh:
    async def test_not_forced_is_noop_within_ttl(self) -> None:
        clock = FakeClock()
        client = FakeClient(FILES)
        index = DocumentIndex(clock=clock)
        await index.initialize(client)
        clock.advance(minutes=30)

        assert await index.refresh(client) is False
        assert client.calls == 1

    async def test_forced_always_reinitializes(self) -> None:
        clock = FakeClock()
        client = FakeClient(FILES)
        index = DocumentIndex(clock=clock)
        await index.initialize(client)
        clock.advance(seconds=1)

        assert await index.refresh(client, force=True) is True
        assert client.calls == 2
        assert index.last_refresh == T0 + timedelta(seconds=1)

    async def test_first_refresh_initializes(self) -> None:
        client = FakeClient(FILES)
        index = DocumentIndex(clock=FakeClock())
        assert await index.refresh(client) is True
        assert client.calls == 1

    async def test_stale_refresh_replaces_documents(self) -> None:
        clock = FakeClock()
        client = FakeClient(FILES)
        index = DocumentIndex(clock=clock)
        await index.initialize(client)

        client.files = FILES[:1]
        clock.advance(hours=2)
        assert await index.refresh(client) is True
        assert [d.path for d in index.documents] == ["README.md"]

    async def test_custom_ttl(self) -> None:
        clock = FakeClock()
        client = FakeClient(FILES)
        index = DocumentIndex(ttl=timedelta(seconds=10), clock=clock)
        await index.initialize(client)
        clock.advance(seconds=11)
        assert await index.refresh(client) is True


# ---------------------------------------------------------------------------
# DocumentIndex.search
# ---------------------------------------------------------------------------


class TestSearch:
    async def _index(self) -> DocumentIndex:
        files = [
            DocumentFile(path="README.md", content="# AL-Go\nGeneral intro", name="README.md"),
            DocumentFile(
                path="Scenarios/workflows.md",
                content="# Workflow Setup\nConfigure the workflow.\n## Workflow triggers",
                name="workflows.md",
            ),
            DocumentFile(path="Workshop/misc.md", content="mentions workflow once", name="misc.md"),
        ]
        index = DocumentIndex(clock=FakeClock())
        await index.initialize(FakeClient(files))
        return index

    async def test_orders_by_score(self) -> None:
        index = await self._index()
        results = index.search("workflow")
        assert [r.path for r in results] == ["Scenarios/workflows.md", "Workshop/misc.md"]
        assert results[0].score > results[1].score
        assert results[0].title == "Workflow Setup"

    async def test_limit_truncates(self) -> None:
        index = await self._index()
        assert len(index.search("workflow", limit=1)) == 1

    async def test_no_match_returns_empty(self) -> None:
        index = await self._index()
        assert index.search("kubernetes") == []

    def test_empty_index_returns_empty(self) -> None:
        assert DocumentIndex().search("workflow") == []
