"""
Pydantic models for Cursor-Cortex MCP Server.

Contains data models for parsed branch-note sections, listings of stored
files, and the Knowledge Archaeology analyses.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class SectionKind(str, Enum):
    ENTRY = "entry"
    COMMIT = "commit"


class Section(BaseModel):
    """One parsed unit of a branch note: an entry or a commit separator."""

    model_config = ConfigDict(frozen=True)

    kind: SectionKind
    raw: str
    header: str
    body: str
    short_hash: str = ""
    full_hash: str = ""
    commit_message: str = ""
    timestamp: str = ""

    @property
    def is_commit(self) -> bool:
        return self.kind is SectionKind.COMMIT

    @property
    def message(self) -> str:
        """Body text without surrounding blank lines or the trailing rule of a following commit."""
        lines = self.body.strip("\n").split("\n")
        while lines and lines[-1].strip() in ("---", ""):
            lines.pop()
        return "\n".join(lines)

    @property
    def summary(self) -> str:
        """Non-blank body lines joined on one line."""
        return " ".join(line for line in self.message.split("\n") if line.strip())


class BranchNoteInfo(BaseModel):
    """A branch note found on disk while listing."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    project_name: str
    branch_name: str
    file_path: Path
    is_current_project: bool = False


class ContextFileInfo(BaseModel):
    """A context file found on disk while listing."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    project: str
    branch: str
    title: str
    path: Path
    is_external: bool = False


class ContextInfo(BaseModel):
    """Structured view of a context file used by the narrative."""

    title: str
    description: str
    raw_content: str = ""


class KnowledgeDocInfo(BaseModel):
    """A tacit knowledge document matched by listing or search."""

    project: str
    document: str
    title: str
    tags: list[str] = []


class Relationship(BaseModel):
    """A pattern detected in a branch note (ticket, feature type, technology)."""

    type: str
    value: str
    confidence: str


class BranchAnalysis(BaseModel):
    """Knowledge Archaeology analysis of one branch note."""

    project_name: str
    branch_name: str
    is_current_project: bool
    completeness_score: int
    production_readiness: str
    relationships: list[Relationship]
    entry_count: int
    word_count: int
    has_commit_separators: bool
    last_modified: datetime


class TimelineEvent(BaseModel):
    """An event on the reconstructed project timeline."""

    type: str
    date: str
    branch: str = ""
    hash: str = ""
    description: str = ""
    significance: str = "medium"
