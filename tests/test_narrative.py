"""
Tests for project narrative construction.
"""

import pytest

MAIN_NOTE = "# Branch Note: main (shop)\n\n## 2024-03-02 10:00:00\nReviewed the queue design.\n\n"


@pytest.fixture
def shop_notes(write_note, sample_note_text):
    write_note("shop", "feature-x", sample_note_text)
    write_note("shop", "main", MAIN_NOTE)


class TestConstructTimeline:
    """Tests for construct_timeline."""

    def test_commits_carry_hash_and_message(self, sample_note_text):
        """Commit events use the parsed short hash, timestamp and message."""
        from cursor_cortex.narrative import construct_timeline
        from cursor_cortex.sections import parse_sections

        events = construct_timeline({"feature-x": parse_sections(sample_note_text)})
        commits = [e for e in events if e.type == "commit"]

        assert len(commits) == 1
        assert commits[0].hash == "1234abcd"
        assert commits[0].date == "2024-03-02 12:00:00"
        assert commits[0].description == "Add checkout queue SHOP-42"
        assert commits[0].significance == "high"

    def test_chronological_across_branches(self, sample_note_text):
        """Events from several branches are merged by date."""
        from cursor_cortex.narrative import construct_timeline
        from cursor_cortex.sections import parse_sections

        events = construct_timeline({
            "feature-x": parse_sections(sample_note_text),
            "main": parse_sections(MAIN_NOTE),
        })

        assert [e.date for e in events] == [
            "2024-03-01 09:00:00",
            "2024-03-02 10:00:00",
            "2024-03-02 11:30:00",
            "2024-03-02 12:00:00",
            "2024-03-03 08:15:00",
        ]
        assert events[1].branch == "main"

    def test_unparsable_dates_last(self):
        """Events without a readable date go to the end."""
        from cursor_cortex.narrative import construct_timeline
        from cursor_cortex.sections import parse_sections

        text = "# h\n\n## someday\nidea\n\n## 2024-01-01 10:00:00\nwork\n\n"
        events = construct_timeline({"main": parse_sections(text)})

        assert [e.date for e in events] == ["2024-01-01 10:00:00", "someday"]


def test_extract_context_around_keyword():
    """A matching line is joined with its neighbours; tiny snippets are dropped."""
    from cursor_cortex.narrative import extract_context_around_keyword

    assert extract_context_around_keyword("alpha\nthe API layer\nomega", "api") == ["alpha the API layer omega"]
    assert extract_context_around_keyword("api", "api") == []


def test_identify_key_decisions():
    """Decision phrases yield the decision and, where present, its reasoning."""
    from cursor_cortex.narrative import identify_key_decisions

    decisions = identify_key_decisions(
        "We decided to use a queue.\nChose postgres because it has JSONB.\nApproached caching by memoizing calls."
    )

    assert [(d.decision, d.reasoning) for d in decisions] == [
        ("use a queue", None),
        ("postgres", "it has JSONB"),
        ("caching", "memoizing calls"),
    ]


@pytest.mark.parametrize(
    "text,expected",
    [
        ("deployed to production, live after staging", "high"),
        ("deployed to staging", "medium"),
        ("sketching ideas", "low"),
    ],
)
def test_assess_readiness(text, expected):
    """Four signals mean high readiness, two mean medium."""
    from cursor_cortex.narrative import assess_readiness

    assert assess_readiness(text) == expected


class TestConstructProjectNarrative:
    """Tests for construct_project_narrative."""

    async def test_full(self, shop_notes):
        """A full narrative has every part."""
        from cursor_cortex.narrative import construct_project_narrative

        result = await construct_project_narrative("shop")

        assert result.startswith("# 📖 Project Narrative: shop")
        assert "## 🎯 Executive Summary" in result
        assert "- **2024-03-02 12:00:00**: Commit 1234abcd (feature-x) - Add checkout queue SHOP-42" in result
        assert "## 🛠️ Technical Journey" in result
        assert "## 🚀 Production Readiness" in result
        assert "- **Decision**: use a queue for order events" in result

    async def test_technical(self, shop_notes):
        """A technical narrative skips the executive parts."""
        from cursor_cortex.narrative import construct_project_narrative

        result = await construct_project_narrative("shop", narrative_type="technical")

        assert "## ⏱️ Project Timeline" in result
        assert "## 🎯 Executive Summary" not in result
        assert "## 🚀 Production Readiness" not in result

    async def test_executive(self, shop_notes):
        """An executive narrative lists commit messages as achievements."""
        from cursor_cortex.narrative import construct_project_narrative

        result = await construct_project_narrative("shop", narrative_type="executive")

        assert "**Key Achievements**:\n- Add checkout queue SHOP-42\n" in result
        assert "## ⏱️ Project Timeline" not in result

    async def test_single_branch(self, shop_notes):
        """branch_name limits the narrative to that branch."""
        from cursor_cortex.narrative import construct_project_narrative

        result = await construct_project_narrative("shop", branch_name="main", narrative_type="technical")

        assert "Reviewed the queue design." in result
        assert "1234abcd" not in result

    async def test_context_objective(self, shop_notes):
        """The main context file supplies title and objective."""
        from cursor_cortex.context_files import update_context_file
        from cursor_cortex.narrative import construct_project_narrative

        await update_context_file("shop", "main", "Checkout Service", "Take payments reliably")
        result = await construct_project_narrative("shop")

        assert "**Project**: Checkout Service" in result
        assert "**Objective**: Take payments reliably" in result

    async def test_nothing_to_narrate(self, storage_root):
        """A project without notes or knowledge says so."""
        from cursor_cortex.narrative import construct_project_narrative

        result = await construct_project_narrative("nope")

        assert result == 'No branch notes or knowledge documents found for project "nope".'
