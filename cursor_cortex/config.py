"""
Configuration module for Cursor-Cortex MCP Server.

Uses pydantic-settings for configuration management with environment variable support.
Environment variables use CURSOR_CORTEX_ prefix (e.g., CURSOR_CORTEX_STORAGE_ROOT).
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_default_storage_root() -> Path:
    """Get default storage root in the user's home directory."""
    return Path.home() / ".cursor-cortex"


class Settings(BaseSettings):
    """Application settings with environment variable support.

    Environment variables:
    - CURSOR_CORTEX_STORAGE_ROOT: Root directory for all stored markdown files
    - CURSOR_CORTEX_DEFAULT_PROJECT: Project used when a bare string is sent to a tool
    - CURSOR_CORTEX_DEFAULT_BRANCH: Branch used when none is given
    - CURSOR_CORTEX_MAX_CONTENT_SIZE: Maximum size of a single write in bytes
    - CURSOR_CORTEX_MAX_NAME_LENGTH: Maximum length of a project, branch or document name
    - CURSOR_CORTEX_LOG_LEVEL: Minimum log level (DEBUG, INFO, WARNING, ERROR)
    """

    storage_root: Path = Field(default_factory=_get_default_storage_root)
    default_project: str = "default-project"
    default_branch: str = "main"
    max_content_size: int = 1 * 1024 * 1024  # 1MB in bytes
    max_name_length: int = 200
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="CURSOR_CORTEX_")


# Global settings instance
settings = Settings()

# Storage subdirectories under the root
STORAGE_DIRS = ("branch_notes", "context", "knowledge", "checklists")

# Bare-string arguments bind to one field per tool; the other fields take these defaults
DIRECT_STRING_BINDINGS = {
    "update_branch_note": {
        "param": "message",
        "defaults": {"branchName": settings.default_branch, "projectName": settings.default_project},
    },
    "create_tacit_knowledge": {
        "param": "title",
        "defaults": {
            "author": "User",
            "projectName": settings.default_project,
            "problemStatement": "No problem statement provided",
            "approach": "No approach provided",
            "outcome": "No outcome provided",
        },
    },
    "create_completion_checklist": {
        "param": "featureName",
        "defaults": {
            "projectName": settings.default_project,
            "owner": "User",
            "requirements": "No requirements provided",
            "objectives": "No objectives provided",
        },
    },
}


# ============== Path Functions ==============

def sanitize_name(name: str) -> str:
    """Replace every character outside [A-Za-z0-9_-] with an underscore."""
    return "".join(c if (c.isascii() and c.isalnum()) or c in "-_" else "_" for c in name)


def get_branch_notes_root() -> Path:
    return settings.storage_root / "branch_notes"


def get_branch_note_path(project_name: str, branch_name: str) -> Path:
    """Path of the live branch note for a (project, branch) identity."""
    return get_branch_notes_root() / sanitize_name(project_name) / f"{sanitize_name(branch_name)}.md"


def get_branch_note_archive_path(project_name: str, branch_name: str, archive_date: str) -> Path:
    """Path of the dated archive, e.g. archives/feature_x_20240115.md."""
    file_name = f"{sanitize_name(branch_name)}_{archive_date.replace('-', '')}.md"
    return get_branch_notes_root() / sanitize_name(project_name) / "archives" / file_name


def get_context_root() -> Path:
    return settings.storage_root / "context"


def get_context_file_path(project_name: str, branch_name: str) -> Path:
    return get_context_root() / sanitize_name(project_name) / f"{sanitize_name(branch_name)}_context.md"


def get_knowledge_root() -> Path:
    return settings.storage_root / "knowledge"


def get_knowledge_dir(project_name: str) -> Path:
    return get_knowledge_root() / sanitize_name(project_name)


def get_checklist_dir(project_name: str) -> Path:
    return settings.storage_root / "checklists" / sanitize_name(project_name)
