"""
Tests for tacit knowledge documents.
"""

import pytest


@pytest.fixture
async def knowledge_docs(storage_root, monkeypatch):
    """Two documents in api and one in web."""
    from cursor_cortex.knowledge import create_tacit_knowledge

    monkeypatch.setattr("cursor_cortex.knowledge.current_date", lambda: "2024-06-01")

    await create_tacit_knowledge(
        "Retry Policy", "Dana", "api", "Calls time out", "Exponential backoff", "Fewer failures",
        tags="Networking, Resilience",
    )
    await create_tacit_knowledge(
        "Schema Migrations", "Dana", "api", "Drift between envs", "Run migrations in CI", "Stable schema",
        branch_name="main", tags="database",
    )
    await create_tacit_knowledge(
        "Cache Warmup", "Kim", "web", "Cold starts", "Prefetch on deploy", "Faster first load",
    )
    return storage_root / "knowledge"


class TestCreateTacitKnowledge:
    """Tests for create_tacit_knowledge."""

    async def test_document_layout(self, knowledge_docs):
        """Basic information, context and outcome are written."""
        text = (knowledge_docs / "api" / "2024-06-01-Retry_Policy.md").read_text()

        assert text.startswith("# Tacit Knowledge Capture\n")
        assert "**Title:** Retry Policy  \n" in text
        assert "**Author:** Dana  \n" in text
        assert "**Tags:** Networking, Resilience  \n" in text
        assert "**Problem Statement:**  \nCalls time out\n" in text
        assert "### Approach\nExponential backoff\n" in text
        assert "**Outcome:**  \nFewer failures\n" in text

    async def test_optional_fields_omitted(self, knowledge_docs):
        """Branch and tags lines only appear when given."""
        text = (knowledge_docs / "web" / "2024-06-01-Cache_Warmup.md").read_text()

        assert "**Branch:**" not in text
        assert "**Tags:**" not in text

    async def test_empty_title(self, storage_root):
        """An empty title is rejected."""
        from cursor_cortex.knowledge import create_tacit_knowledge
        from cursor_cortex.utils import ContentValidationError

        with pytest.raises(ContentValidationError):
            await create_tacit_knowledge("  ", "Dana", "api", "p", "a", "o")


class TestReadTacitKnowledge:
    """Tests for read_tacit_knowledge."""

    async def test_list_all_projects(self, knowledge_docs):
        """Listing spans every project by default."""
        from cursor_cortex.knowledge import read_tacit_knowledge

        result = await read_tacit_knowledge("api")

        assert result.startswith("# Available Knowledge Documents (All Projects)")
        assert "Found 3 document(s) across 2 project(s)" in result
        assert "## Project: web" in result

    async def test_list_one_project(self, knowledge_docs):
        """crossProject=false lists only the named project."""
        from cursor_cortex.knowledge import read_tacit_knowledge

        result = await read_tacit_knowledge("api", cross_project=False)

        assert result.startswith("# Available Knowledge Documents for api")
        assert "2024-06-01-Retry_Policy.md" in result
        assert "Cache_Warmup" not in result

    async def test_search_term(self, knowledge_docs):
        """A term matches document content case-insensitively."""
        from cursor_cortex.knowledge import read_tacit_knowledge

        result = await read_tacit_knowledge("api", search_term="BACKOFF")

        assert result.startswith("# Knowledge Search Results")
        assert "- **Retry Policy** (api/2024-06-01-Retry_Policy.md) [Tags: networking, resilience]" in result
        assert "Schema Migrations" not in result

    async def test_search_any_tag(self, knowledge_docs):
        """A document matches when it carries any requested tag."""
        from cursor_cortex.knowledge import read_tacit_knowledge

        result = await read_tacit_knowledge("api", search_tags="database, resilience")

        assert "Found 2 document(s)" in result
        assert "Cache Warmup" not in result

    async def test_search_no_match(self, knowledge_docs):
        """A search without hits says so."""
        from cursor_cortex.knowledge import read_tacit_knowledge

        result = await read_tacit_knowledge("api", search_term="kubernetes")

        assert result == "No knowledge documents found matching the search criteria."

    async def test_read_by_partial_name(self, knowledge_docs):
        """A partial document name reads the document."""
        from cursor_cortex.knowledge import read_tacit_knowledge

        result = await read_tacit_knowledge("api", "Schema")

        assert "**Title:** Schema Migrations" in result

    async def test_missing_document(self, knowledge_docs):
        """A missing document raises DocumentNotFoundError."""
        from cursor_cortex.knowledge import read_tacit_knowledge
        from cursor_cortex.utils import DocumentNotFoundError

        with pytest.raises(DocumentNotFoundError):
            await read_tacit_knowledge("api", "nothing-here")

    async def test_document_name_traversal(self, knowledge_docs):
        """Document names are file names and may not hold separators."""
        from cursor_cortex.knowledge import read_tacit_knowledge
        from cursor_cortex.utils import PathValidationError

        with pytest.raises(PathValidationError):
            await read_tacit_knowledge("api", "../web/notes")

    async def test_empty_store(self, storage_root):
        """Listing with no documents reports none."""
        from cursor_cortex.knowledge import read_tacit_knowledge

        assert await read_tacit_knowledge("api") == "No knowledge documents found across all projects."
        assert await read_tacit_knowledge("api", cross_project=False) == "No knowledge documents found for project api."


def test_extract_tags():
    """Tags are split on commas and lower-cased."""
    from cursor_cortex.knowledge import extract_tags

    assert extract_tags("**Tags:** Foo, bar ,Baz  \n") == ["foo", "bar", "baz"]
    assert extract_tags("no tags here") == []


async def test_project_knowledge_text(knowledge_docs):
    """Each document is concatenated under its own banner."""
    from cursor_cortex.knowledge import get_project_knowledge_text

    text = await get_project_knowledge_text("api")

    assert "=== KNOWLEDGE: 2024-06-01-Retry_Policy ===" in text
    assert "=== KNOWLEDGE: 2024-06-01-Schema_Migrations ===" in text
