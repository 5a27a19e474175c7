"""
Utility functions and compiled regex patterns for Cursor-Cortex MCP Server.

Contains exceptions, validation utilities, timestamp helpers, async file
helpers and pre-compiled patterns.
"""

import re
from datetime import date, datetime
from pathlib import Path

import aiofiles
import aiofiles.os

from .config import settings

# Pre-compiled regex patterns for performance
TIMESTAMP_PATTERN = re.compile(r'\d{4}-\d{2}-\d{2}')
ARCHIVE_DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
TICKET_PATTERN = re.compile(r'[A-Z]+-\d+')
CHECKBOX_PATTERN = re.compile(r'- \[([ x])\] (.*)')
TITLE_HEADING_PATTERN = re.compile(r'^# (.+)$', re.MULTILINE)
KNOWLEDGE_TITLE_PATTERN = re.compile(r'\*\*Title:\*\*\s*(.*?)\s*\n')
KNOWLEDGE_TAGS_PATTERN = re.compile(r'\*\*Tags:\*\*\s*(.*?)\s*\n')

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


# ============== Exceptions ==============

class CortexError(Exception):
    """Base class for Cursor-Cortex errors."""
    pass


class NoteNotFoundError(CortexError):
    """Raised when a branch note, context file, checklist or document is absent."""
    pass


class DocumentNotFoundError(NoteNotFoundError):
    """Raised when a tacit knowledge document cannot be located."""
    pass


class ValidationError(CortexError):
    """Raised when caller-supplied input is malformed."""
    pass


class PathValidationError(ValidationError):
    """Raised when path validation fails."""
    pass


class ContentValidationError(ValidationError):
    """Raised when content validation fails."""
    pass


class ToolError(CortexError):
    """Raised by the tool layer when storage I/O fails during a call."""
    pass


# ============== Timestamps ==============

def current_timestamp() -> str:
    """Local time truncated to seconds, e.g. '2024-01-15 14:03:22'."""
    return datetime.now().strftime(TIMESTAMP_FORMAT)


def current_date() -> str:
    """Local date, e.g. '2024-01-15'."""
    return date.today().isoformat()


def parse_timestamp(value: str) -> datetime | None:
    """Parse 'YYYY-MM-DD' or 'YYYY-MM-DD HH:MM:SS'. Returns None if unparsable.

    Offset-qualified values are converted to naive local time.
    """
    try:
        parsed = datetime.fromisoformat(value.strip())
    except (ValueError, AttributeError):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


# ============== Security Validation ==============

def validate_name(name: str, kind: str = "Name") -> str:
    """Validate a project, branch or feature name.

    Separators are allowed; the path helpers sanitize them.

    Raises:
        PathValidationError: If the name is empty or too long
    """
    if not name or not name.strip():
        raise PathValidationError(f"{kind} cannot be empty")

    name = name.strip()

    if len(name) > settings.max_name_length:
        raise PathValidationError(f"{kind} exceeds maximum length of {settings.max_name_length} characters")

    return name


def validate_file_name(name: str, kind: str = "Name") -> str:
    """Validate a checklist or document name that is used as a file name.

    Raises:
        PathValidationError: If the name is empty, too long or attempts traversal
    """
    name = validate_name(name, kind)

    if ".." in name or "/" in name or "\\" in name:
        raise PathValidationError(f"Path traversal detected in {kind.lower()}: '{name}'")

    return name


def validate_path_within_root(path: Path, root: Path) -> Path:
    """Verify a resolved path stays inside the storage root.

    Raises:
        PathValidationError: If the path escapes the root
    """
    full_path = path.resolve()
    try:
        full_path.relative_to(root.resolve())
    except ValueError:
        raise PathValidationError(f"Path escapes storage directory: {path}")
    return full_path


def validate_content_size(content: str) -> str:
    """Validate content size.

    Raises:
        ContentValidationError: If the content exceeds size limits
    """
    content_bytes = len(content.encode('utf-8'))

    if content_bytes > settings.max_content_size:
        max_mb = settings.max_content_size / (1024 * 1024)
        actual_mb = content_bytes / (1024 * 1024)
        raise ContentValidationError(
            f"Content size ({actual_mb:.2f}MB) exceeds maximum allowed size ({max_mb}MB)"
        )

    return content


# ============== Async File Helpers ==============

async def read_text(path: Path) -> str:
    """Read a UTF-8 file. FileNotFoundError propagates to the caller."""
    async with aiofiles.open(path, mode="r", encoding="utf-8") as f:
        return await f.read()


async def read_text_or_none(path: Path) -> str | None:
    """Read a UTF-8 file, returning None when it does not exist."""
    try:
        return await read_text(path)
    except FileNotFoundError:
        return None


async def write_text(path: Path, content: str) -> None:
    """Write a UTF-8 file, creating missing parent directories first."""
    path.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(path, mode="w", encoding="utf-8") as f:
        await f.write(content)


async def append_text(path: Path, content: str) -> None:
    """Append to a UTF-8 file in append mode, creating parent directories first."""
    path.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(path, mode="a", encoding="utf-8") as f:
        await f.write(content)


async def list_dir(path: Path) -> list[str]:
    """Sorted directory entries, or an empty list when the directory is absent."""
    try:
        return sorted(await aiofiles.os.listdir(path))
    except FileNotFoundError:
        return []
