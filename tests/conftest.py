"""
Pytest configuration and fixtures for cursor-cortex tests.
"""

from datetime import datetime, timedelta
from pathlib import Path

import pytest


class FakeClock:
    """Stands in for current_timestamp; every call advances one minute."""

    def __init__(self, start: str = "2024-01-15 10:00:00"):
        self.now = datetime.fromisoformat(start)
        self.issued: list[str] = []

    def __call__(self) -> str:
        value = self.now.strftime("%Y-%m-%d %H:%M:%S")
        self.issued.append(value)
        self.now += timedelta(minutes=1)
        return value


@pytest.fixture
def storage_root(tmp_path: Path, monkeypatch):
    """Point the settings at an empty temporary storage root."""
    from cursor_cortex.config import settings

    root = tmp_path / "cortex"
    root.mkdir()
    monkeypatch.setattr(settings, "storage_root", root)
    return root


@pytest.fixture
def clock(monkeypatch):
    """Deterministic timestamps for branch note writes (10:00, 10:01, ...)."""
    fake = FakeClock()
    monkeypatch.setattr("cursor_cortex.branch_notes.current_timestamp", fake)
    monkeypatch.setattr("cursor_cortex.branch_notes.current_date", lambda: "2024-01-15")
    return fake


@pytest.fixture
async def scenario_note(storage_root, clock):
    """Two entries, a commit, then one more entry in api/main.

    Timestamps: 10:00 login, 10:01 bug fix, 10:02 commit, 10:03 docs.
    """
    from cursor_cortex.branch_notes import append_commit_separator, append_entry

    await append_entry("api", "main", "Added login flow")
    await append_entry("api", "main", "Fixed bug")
    await append_commit_separator("api", "main", "abcdef1234567890", "release v1")
    await append_entry("api", "main", "Started docs")
    return storage_root / "branch_notes" / "api" / "main.md"


@pytest.fixture
def write_note(storage_root):
    """Write raw branch note text for a project/branch."""
    def _write(project: str, branch: str, content: str) -> Path:
        path = storage_root / "branch_notes" / project / f"{branch}.md"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


SAMPLE_NOTE = """# Branch Note: feature-x (shop)

## 2024-03-01 09:00:00
Working on the checkout api. Decided to use a queue for order events.

## 2024-03-02 11:30:00
Fixed the retry problem; implemented backoff to avoid duplicate charges.
Tested against staging, deployed to production.

---

## COMMIT: 1234abcd | 2024-03-02 12:00:00
**Full Hash:** 1234abcd5678ef90
**Message:** Add checkout queue SHOP-42

---

## 2024-03-03 08:15:00
Performance improvement for SHOP-42 using python workers.

"""


@pytest.fixture
def sample_note_text() -> str:
    return SAMPLE_NOTE
