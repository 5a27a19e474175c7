"""
Tests for completion checklist functions.
"""

import pytest


@pytest.fixture
def today(monkeypatch):
    monkeypatch.setattr("cursor_cortex.checklists.current_date", lambda: "2024-05-01")
    return "2024-05-01"


@pytest.fixture
async def checklist(storage_root, today):
    """A checklist for feature 'Login' in project api."""
    from cursor_cortex.checklists import create_completion_checklist

    await create_completion_checklist(
        "api",
        "Login",
        "Dana",
        "OAuth support\nRate limiting",
        "Let users sign in",
        test_criteria="Unit tests pass",
        jira_ticket="API-7",
    )
    return storage_root / "checklists" / "api" / "2024-05-01-Login-checklist.md"


class TestCreateCompletionChecklist:
    """Tests for create_completion_checklist."""

    async def test_template(self, checklist):
        """Sections, items and sign-off lines are rendered."""
        text = checklist.read_text()

        assert text.startswith("# Completion Checklist: Login\n")
        assert "- **Jira Ticket:** API-7" in text
        assert "### Objectives\n- [ ] Let users sign in\n" in text
        assert "### Requirements\n- [ ] OAuth support\n- [ ] Rate limiting\n" in text
        assert "## Testing Criteria\n- [ ] Unit tests pass\n" in text
        assert "- [ ] Technical decisions and their rationale" in text
        assert "**Implementation Complete:** _____________ Date: _______" in text
        assert "**Project Owner Approval:** _____________ Date: _______" in text

    async def test_no_testing_section_without_criteria(self, storage_root, today):
        """The testing section is optional."""
        from cursor_cortex.checklists import create_completion_checklist

        await create_completion_checklist("api", "Search", "Dana", "r", "o")

        text = (storage_root / "checklists" / "api" / "2024-05-01-Search-checklist.md").read_text()
        assert "## Testing Criteria" not in text


class TestReadChecklist:
    """Tests for read_checklist."""

    async def test_list(self, checklist):
        """'list' shows the available checklists."""
        from cursor_cortex.checklists import read_checklist

        result = await read_checklist("api", "list")

        assert result == "# Available Checklists for api\n\n- 2024-05-01-Login-checklist.md"

    async def test_partial_name(self, checklist):
        """A partial name finds the checklist."""
        from cursor_cortex.checklists import read_checklist

        assert (await read_checklist("api", "Login")) == checklist.read_text()

    async def test_exact_name(self, checklist):
        """An exact file name finds the checklist."""
        from cursor_cortex.checklists import read_checklist

        assert (await read_checklist("api", "2024-05-01-Login-checklist.md")) == checklist.read_text()

    async def test_not_found(self, storage_root):
        """A missing checklist raises NoteNotFoundError."""
        from cursor_cortex.checklists import read_checklist
        from cursor_cortex.utils import NoteNotFoundError

        with pytest.raises(NoteNotFoundError):
            await read_checklist("api", "nothing")

    async def test_empty_list(self, storage_root):
        """Listing an empty project says so."""
        from cursor_cortex.checklists import read_checklist

        assert await read_checklist("api") == "No checklists found for project api."


class TestUpdateChecklist:
    """Tests for update_checklist."""

    async def test_manual_toggle_only_addressed_item(self, checklist):
        """Requirements.2 ticks the second requirement and nothing else."""
        from cursor_cortex.checklists import update_checklist

        before = checklist.read_text()
        result = await update_checklist("api", "Login", item_path="Requirements.2", status=True)
        after = checklist.read_text()

        assert "Updated item at Requirements.2 to completed" in result
        assert "- [x] Rate limiting" in after
        assert "- [ ] OAuth support" in after
        changed = [(a, b) for a, b in zip(before.split("\n"), after.split("\n")) if a != b]
        assert changed == [("- [ ] Rate limiting", "- [x] Rate limiting")]

    async def test_manual_untick(self, checklist):
        """status=false unticks an item."""
        from cursor_cortex.checklists import update_checklist

        await update_checklist("api", "Login", item_path="Objectives.1", status=True)
        await update_checklist("api", "Login", item_path="Objectives.1", status=False)

        assert "- [ ] Let users sign in" in checklist.read_text()

    async def test_invalid_path(self, checklist):
        """An item path that does not exist is a validation error."""
        from cursor_cortex.checklists import update_checklist
        from cursor_cortex.utils import ValidationError

        with pytest.raises(ValidationError):
            await update_checklist("api", "Login", item_path="Requirements.9", status=True)
        with pytest.raises(ValidationError):
            await update_checklist("api", "Login", item_path="Requirements", status=True)

    async def test_needs_mode(self, checklist):
        """Neither autoUpdate nor itemPath/status is an error."""
        from cursor_cortex.checklists import update_checklist
        from cursor_cortex.utils import ValidationError

        with pytest.raises(ValidationError):
            await update_checklist("api", "Login")

    async def test_auto_update_from_branch_note(self, checklist, write_note):
        """Items whose topic appears in the branch note are ticked."""
        from cursor_cortex.checklists import update_checklist

        write_note("api", "main", "# Branch Note\n\n## 2024-05-01 10:00:00\nOne lesson: a workaround for the token challenge.\n\n")

        result = await update_checklist("api", "Login", auto_update=True)
        text = checklist.read_text()

        assert "Auto-updated" in result
        assert "- [x] Implementation challenges and solutions" in text
        assert "- [x] Lessons learned during development" in text
        assert "- [ ] OAuth support" in text

    async def test_auto_update_without_evidence(self, checklist):
        """Nothing is ticked when the branch has no notes."""
        from cursor_cortex.checklists import update_checklist

        result = await update_checklist("api", "Login", auto_update=True)

        assert result.startswith("No updates made to checklist: Login")


class TestSignOffChecklist:
    """Tests for sign_off_checklist."""

    async def test_keeps_label(self, checklist):
        """The signed line keeps its label and gains signer and date."""
        from cursor_cortex.checklists import sign_off_checklist

        result = await sign_off_checklist("api", "Login", "Testing", "Sam")
        text = checklist.read_text()

        assert "**Testing Complete:** Sam Date: 2024-05-01" in text
        assert "**Implementation Complete:** _____________ Date: _______" in text
        assert "by Sam on 2024-05-01" in result

    async def test_invalid_item(self, checklist):
        """Unknown sign-off items are rejected."""
        from cursor_cortex.checklists import sign_off_checklist
        from cursor_cortex.utils import ValidationError

        with pytest.raises(ValidationError, match="Valid options"):
            await sign_off_checklist("api", "Login", "Deploy", "Sam")

    async def test_twice(self, checklist):
        """Signing the same item again is rejected."""
        from cursor_cortex.checklists import sign_off_checklist
        from cursor_cortex.utils import ValidationError

        await sign_off_checklist("api", "Login", "Approval", "Sam")

        with pytest.raises(ValidationError, match="already"):
            await sign_off_checklist("api", "Login", "Approval", "Kim")

    async def test_backslash_in_signer(self, checklist):
        """Backslashes in the signer name are written literally."""
        from cursor_cortex.checklists import sign_off_checklist

        await sign_off_checklist("api", "Login", "Testing", r"ACME\jdoe")

        assert r"**Testing Complete:** ACME\jdoe Date: 2024-05-01" in checklist.read_text()
