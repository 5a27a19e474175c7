"""
Branch note section parser for Cursor-Cortex MCP Server.

A branch note is a header followed by sections, each introduced by the
literal "## ". Entries carry a timestamp header; commit separators carry a
"COMMIT: <short> | <timestamp>" header. Every reader of branch notes goes
through this module so they all agree on where sections begin and end.
"""

import re
from datetime import datetime

import structlog

from .models import Section, SectionKind
from .utils import parse_timestamp

logger = structlog.get_logger(__name__)

SECTION_DELIMITER = "## "
COMMIT_MARKER = "COMMIT:"

COMMIT_HEADER_PATTERN = re.compile(r'COMMIT:\s*(\S+)\s*\|\s*(.+)')
FULL_HASH_PATTERN = re.compile(r'\*\*Full Hash:\*\*\s*(\S+)')
COMMIT_MESSAGE_PATTERN = re.compile(r'\*\*Message:\*\*[ \t]*(.*)')


def branch_note_header(project_name: str, branch_name: str) -> str:
    return f"# Branch Note: {branch_name} ({project_name})\n\n"


def format_entry(timestamp: str, message: str) -> str:
    return f"## {timestamp}\n{message}\n\n"


def format_commit_separator(commit_hash: str, commit_message: str, timestamp: str) -> str:
    return (
        f"\n---\n\n## COMMIT: {commit_hash[:8]} | {timestamp}\n"
        f"**Full Hash:** {commit_hash}\n"
        f"**Message:** {commit_message}\n\n---\n\n"
    )


def is_commit_separator(text: str) -> bool:
    return COMMIT_MARKER in text


def _build_section(piece: str) -> Section:
    header, _, body = piece.partition("\n")
    header = header.strip()

    if not is_commit_separator(piece):
        return Section(kind=SectionKind.ENTRY, raw=piece, header=header, body=body, timestamp=header)

    short_hash = timestamp = full_hash = commit_message = ""
    header_match = COMMIT_HEADER_PATTERN.search(header)
    if header_match:
        short_hash = header_match.group(1)
        timestamp = header_match.group(2).strip()
    hash_match = FULL_HASH_PATTERN.search(body)
    if hash_match:
        full_hash = hash_match.group(1)
    message_match = COMMIT_MESSAGE_PATTERN.search(body)
    if message_match:
        commit_message = message_match.group(1).strip()

    return Section(
        kind=SectionKind.COMMIT,
        raw=piece,
        header=header,
        body=body,
        short_hash=short_hash,
        full_hash=full_hash or short_hash,
        commit_message=commit_message,
        timestamp=timestamp,
    )


def parse_sections(content: str) -> list[Section]:
    """Split branch note text into its ordered sections.

    The text before the first delimiter is the header and is dropped. A "## "
    anywhere, not only at the start of a line, begins a new section; stored
    notes depend on this.
    """
    pieces = content.split(SECTION_DELIMITER)[1:]
    return [_build_section(piece) for piece in pieces if piece]


def entries_only(sections: list[Section]) -> list[Section]:
    return [s for s in sections if not s.is_commit]


def last_commit_index(sections: list[Section]) -> int:
    """Index of the most recent commit separator, or -1."""
    for index in range(len(sections) - 1, -1, -1):
        if sections[index].is_commit:
            return index
    return -1


def uncommitted_sections(sections: list[Section]) -> list[Section]:
    """Sections strictly after the last commit separator; all of them if there is none."""
    return sections[last_commit_index(sections) + 1:]


def filter_by_commit(sections: list[Section], commit_hash: str) -> list[Section]:
    """Entries of the era closed by the commit whose hash starts with commit_hash."""
    wanted = commit_hash.strip().lower()
    era: list[Section] = []
    for section in sections:
        if not section.is_commit:
            era.append(section)
            continue
        full = section.full_hash.lower()
        short = section.short_hash.lower()
        if wanted and (full.startswith(wanted) or short.startswith(wanted) or (short and wanted.startswith(short))):
            return era
        era = []
    return []


def _parse_bound(value: str | None, name: str) -> datetime | None:
    if not value:
        return None
    parsed = parse_timestamp(value)
    if parsed is None:
        logger.warning("date_filter_ignored", bound=name, value=value)
    return parsed


def filter_by_date(
    sections: list[Section],
    before_date: str | None = None,
    after_date: str | None = None,
) -> list[Section]:
    """Entries strictly between after_date and before_date.

    Commit separators are never returned. Entries whose timestamp cannot be
    parsed are kept.
    """
    before = _parse_bound(before_date, "before_date")
    after = _parse_bound(after_date, "after_date")

    results: list[Section] = []
    for section in entries_only(sections):
        entry_time = parse_timestamp(section.timestamp)
        if entry_time is None:
            logger.warning("entry_timestamp_unparsable", timestamp=section.timestamp)
            results.append(section)
            continue
        if before is not None and not entry_time < before:
            continue
        if after is not None and not entry_time > after:
            continue
        results.append(section)
    return results


def render_section(section: Section) -> str:
    """Render a section back into branch-note markdown."""
    return f"## {section.header}\n{section.message}\n\n"
