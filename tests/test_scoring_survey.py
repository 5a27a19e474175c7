"""
Tests for Knowledge Archaeology scoring and the enhanced branch survey.
"""

import pytest

LOW_NOTE = "# Branch Note: x (api)\n\n## someday\nidea\n"
WEB_NOTE = "# Branch Note: feature-y (web)\n\n## 2024-03-05 10:00:00\nUI for SHOP-42 checkout.\n\n"


class TestCompletenessScore:
    """Tests for completeness_score."""

    def test_sample_note_is_high(self, sample_note_text):
        """Entries, commit, dates and length put the sample in the high tier."""
        from cursor_cortex.scoring import completeness_score, score_tier

        score = completeness_score(sample_note_text)

        assert score == 77
        assert score_tier(score) == "high"

    def test_minimal_note_is_low(self):
        """A note without dates or commits scores low."""
        from cursor_cortex.scoring import completeness_score, score_tier

        score = completeness_score(LOW_NOTE)

        assert score == 11
        assert score_tier(score) == "low"

    def test_capped_at_100(self):
        """The score never exceeds 100."""
        from cursor_cortex.scoring import completeness_score

        text = "# h\n\n" + "".join(f"## 2024-01-01 10:00:{i:02d}\n{'word ' * 50}\n\n" for i in range(20))
        text += "## COMMIT: abc | 2024-01-02 10:00:00\n"

        assert completeness_score(text) == 100


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Deployed and tested, now live", "Production"),
        ("Working on a draft, still investigating", "Development"),
        ("Nothing to report", "Mixed"),
        ("Deployed but in progress", "Mixed"),
    ],
)
def test_production_readiness(text, expected):
    """One side must outweigh the other by half again to win."""
    from cursor_cortex.scoring import production_readiness

    assert production_readiness(text) == expected


def test_detect_relationships():
    """Tickets, feature types and technologies are detected once each."""
    from cursor_cortex.scoring import detect_relationships

    relationships = detect_relationships("SHOP-42 fix using python. See SHOP-42 again.")

    assert [(r.type, r.value) for r in relationships] == [
        ("ticket", "SHOP-42"),
        ("feature_type", "fix"),
        ("technology", "python"),
    ]
    assert relationships[0].confidence == "high"


@pytest.mark.parametrize("score,tier", [(100, "high"), (70, "high"), (69, "medium"), (30, "medium"), (29, "low")])
def test_score_tier_bounds(score, tier):
    """Tier bounds are inclusive at 70 and 30."""
    from cursor_cortex.scoring import score_tier

    assert score_tier(score) == tier


class TestEnhancedBranchSurvey:
    """Tests for enhanced_branch_survey."""

    @pytest.fixture
    def notes(self, write_note, sample_note_text):
        write_note("shop", "feature-x", sample_note_text)
        write_note("api", "main", LOW_NOTE)
        write_note("web", "feature-y", WEB_NOTE)

    async def test_report(self, notes):
        """The report summarizes, relates and tiers the branches."""
        from cursor_cortex.survey import enhanced_branch_survey

        result = await enhanced_branch_survey(current_project="shop")

        assert result.startswith("# 🔍 Enhanced Branch Survey - Knowledge Archaeology Report")
        assert "- **3 branches** analyzed across **3 projects**" in result
        assert "### shop ⭐ Current" in result
        assert "- **SHOP-42**: Found in 2 branches" in result
        assert "### 🏆 High-Quality Documentation (Score ≥ 70)" in result
        assert "- **shop/feature-x** ⭐ - Score: 77/100" in result
        assert "Found 2 branches with minimal documentation" in result
        assert "- api/main (Score: 11)" in result
        assert "**Cross-Branch Synthesis**" in result

    async def test_min_score(self, notes):
        """Branches below the minimum score are left out."""
        from cursor_cortex.survey import enhanced_branch_survey

        result = await enhanced_branch_survey(min_completeness_score=50)

        assert "- **1 branches** analyzed" in result
        assert "api/main" not in result

    async def test_ordering(self, notes):
        """Analyses are ordered by score, highest first."""
        from cursor_cortex.survey import analyze_branches

        analyses, projects = await analyze_branches()

        assert [a.branch_name for a in analyses][0] == "feature-x"
        scores = [a.completeness_score for a in analyses]
        assert scores == sorted(scores, reverse=True)
        assert projects == ["api", "shop", "web"]

    async def test_no_directory(self, storage_root):
        """Without a branch_notes directory a hint is returned."""
        from cursor_cortex.survey import enhanced_branch_survey

        assert await enhanced_branch_survey() == "No branch notes directory found. Create some branch notes first."

    async def test_only_empty_notes(self, write_note):
        """Header-only notes give nothing to survey."""
        from cursor_cortex.survey import enhanced_branch_survey

        write_note("api", "main", "# Branch Note: main (api)\n\n")

        assert (await enhanced_branch_survey()).startswith("No branch notes with content found.")


@pytest.mark.parametrize("words,level", [(10, "low"), (1001, "medium"), (5001, "high")])
def test_complexity_level(words, level):
    """Complexity grows with the word count."""
    from cursor_cortex.scoring import complexity_level

    assert complexity_level("word " * words) == level
