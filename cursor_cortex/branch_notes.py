"""
Branch note functions for Cursor-Cortex MCP Server.

Contains the append log (entries and commit separators), the read and
filter views, archiving, clearing and the cross-project listing.
"""

import structlog

from .config import (
    get_branch_note_archive_path,
    get_branch_note_path,
    get_branch_notes_root,
)
from .models import BranchNoteInfo, Section
from .sections import (
    branch_note_header,
    filter_by_commit,
    filter_by_date,
    format_commit_separator,
    format_entry,
    last_commit_index,
    parse_sections,
    render_section,
    uncommitted_sections,
)
from .utils import (
    ARCHIVE_DATE_PATTERN,
    NoteNotFoundError,
    ValidationError,
    append_text,
    current_date,
    current_timestamp,
    list_dir,
    read_text,
    read_text_or_none,
    validate_content_size,
    validate_name,
    write_text,
)

logger = structlog.get_logger(__name__)

# Branches listed first, in this order, before the alphabetical rest
PRIORITY_BRANCHES = ("main", "stage")


def _no_note_message(project_name: str, branch_name: str) -> str:
    return f'No branch note exists yet for branch "{branch_name}" in project "{project_name}".'


async def load_sections(project_name: str, branch_name: str) -> list[Section]:
    """Parse the sections of a branch note.

    Raises:
        NoteNotFoundError: If the branch note does not exist
    """
    content = await read_text_or_none(get_branch_note_path(project_name, branch_name))
    if content is None:
        raise NoteNotFoundError(_no_note_message(project_name, branch_name))
    return parse_sections(content)


# ============== Append Log ==============

async def append_entry(project_name: str, branch_name: str, message: str) -> str:
    """Append a timestamped entry, creating the note with its header if needed."""
    project_name = validate_name(project_name, "Project name")
    branch_name = validate_name(branch_name, "Branch name")
    validate_content_size(message)

    file_path = get_branch_note_path(project_name, branch_name)
    has_content = file_path.exists() and file_path.stat().st_size > 0
    prefix = "" if has_content else branch_note_header(project_name, branch_name)

    await append_text(file_path, prefix + format_entry(current_timestamp(), message))
    logger.info("branch_note_updated", project=project_name, branch=branch_name, created=bool(prefix))

    return f'Successfully updated branch note with: "{message}"'


async def append_commit_separator(project_name: str, branch_name: str, commit_hash: str, commit_message: str) -> str:
    """Append a commit separator. The branch note must already exist.

    Raises:
        NoteNotFoundError: If the branch note does not exist
    """
    project_name = validate_name(project_name, "Project name")
    branch_name = validate_name(branch_name, "Branch name")
    if not commit_hash or not commit_hash.strip():
        raise ValidationError("Commit hash cannot be empty")
    commit_hash = commit_hash.strip()
    validate_content_size(commit_message)

    file_path = get_branch_note_path(project_name, branch_name)
    if not file_path.exists():
        raise NoteNotFoundError(
            f"{_no_note_message(project_name, branch_name)} Create one with update_branch_note first."
        )

    await append_text(file_path, format_commit_separator(commit_hash, commit_message, current_timestamp()))
    logger.info("commit_separator_added", project=project_name, branch=branch_name, commit=commit_hash[:8])

    return f"Successfully added commit separator for commit {commit_hash[:8]} to branch note."


# ============== Read Views ==============

async def read_branch_note(project_name: str, branch_name: str) -> str:
    """Return the raw branch note text."""
    content = await read_text_or_none(get_branch_note_path(project_name, branch_name))
    if content is None:
        raise NoteNotFoundError(
            f"{_no_note_message(project_name, branch_name)} Use update_branch_note to create one."
        )
    return content


async def filter_branch_note(
    project_name: str,
    branch_name: str,
    commit_hash: str | None = None,
    before_date: str | None = None,
    after_date: str | None = None,
    uncommitted_only: bool | None = None,
) -> str:
    """Show uncommitted work, or entries filtered by commit hash or date range.

    When uncommitted_only is not given it defaults to True unless a commit
    hash or a date bound is supplied.
    """
    sections = await load_sections(project_name, branch_name)
    if not sections:
        return "Branch note exists but has no entries."

    has_filters = bool(commit_hash or before_date or after_date)
    if uncommitted_only is None:
        uncommitted_only = not has_filters

    if uncommitted_only:
        pending = uncommitted_sections(sections)
        output = f"# Uncommitted Work in Branch Notes for {project_name}\n\n"

        if last_commit_index(sections) == -1:
            output += "*Note: No commit separators found. Showing all entries.*\n\n"
        elif not pending:
            return (
                f'No uncommitted work found in branch notes for "{branch_name}". '
                "All changes have been committed."
            )
        else:
            output += f"*Showing {len(pending)} entries since last commit*\n\n"

        for section in pending:
            output += render_section(section)
        return output

    filtered = filter_by_commit(sections, commit_hash) if commit_hash else sections
    filtered = filter_by_date(filtered, before_date=before_date, after_date=after_date)
    logger.debug("branch_note_filtered", project=project_name, branch=branch_name, matches=len(filtered))

    if not filtered:
        return "No branch notes found matching the filter criteria."

    if commit_hash:
        output = f"# Branch Notes for Commit {commit_hash} in {project_name}\n\n"
    elif before_date or after_date:
        output = f"# Branch Notes for {project_name} ({after_date or 'start'} to {before_date or 'now'})\n\n"
    else:
        output = f"# Filtered Branch Notes for {project_name}\n\n"

    output += "\n".join(render_section(section) for section in filtered)
    return output


# ============== Archive and Clear ==============

async def archive_branch_note(project_name: str, branch_name: str, archive_date: str | None = None) -> str:
    """Copy the note into its dated archive and reset the live note to its header.

    An archive written earlier the same day is overwritten.
    """
    archive_date = archive_date or current_date()
    if not ARCHIVE_DATE_PATTERN.match(archive_date):
        raise ValidationError(f"Invalid archive date: {archive_date}. Expected YYYY-MM-DD")

    file_path = get_branch_note_path(project_name, branch_name)
    archive_path = get_branch_note_archive_path(project_name, branch_name, archive_date)

    content = await read_text_or_none(file_path)
    if content is None:
        raise NoteNotFoundError(_no_note_message(project_name, branch_name))

    await write_text(archive_path, content)
    await write_text(file_path, branch_note_header(project_name, branch_name))
    logger.info("branch_note_archived", project=project_name, branch=branch_name, archive=str(archive_path))

    return f"Successfully archived branch note from {file_path} to {archive_path}"


async def clear_branch_note(
    project_name: str,
    branch_name: str,
    create_archive: bool = True,
    keep_header: bool = True,
) -> str:
    """Reset a branch note to its header (or to nothing), archiving it first by default."""
    file_path = get_branch_note_path(project_name, branch_name)

    content = await read_text_or_none(file_path)
    if content is None:
        raise NoteNotFoundError(_no_note_message(project_name, branch_name))

    if create_archive:
        archive_path = get_branch_note_archive_path(project_name, branch_name, current_date())
        await write_text(archive_path, content)
        logger.info("branch_note_archived", project=project_name, branch=branch_name, archive=str(archive_path))

    await write_text(file_path, branch_note_header(project_name, branch_name) if keep_header else "")
    logger.info("branch_note_cleared", project=project_name, branch=branch_name, keep_header=keep_header)

    suffix = " (archived first)" if create_archive else ""
    return f"Successfully cleared branch note for {branch_name} in project {project_name}{suffix}"


# ============== Listing ==============

def _has_content(content: str) -> bool:
    """True when the note holds more than its header line."""
    return len([line for line in content.split("\n") if line.strip()]) > 1


def _branch_sort_key(branch_name: str) -> tuple[int, str]:
    if branch_name in PRIORITY_BRANCHES:
        return PRIORITY_BRANCHES.index(branch_name), ""
    return len(PRIORITY_BRANCHES), branch_name


async def collect_branch_notes(
    current_project: str | None = None,
    include_empty: bool = False,
) -> tuple[dict[str, list[BranchNoteInfo]], dict[str, int]]:
    """Scan every project directory for branch notes.

    Returns (notes grouped by branch name, branch count per project).
    """
    root = get_branch_notes_root()
    branch_groups: dict[str, list[BranchNoteInfo]] = {}
    project_counts: dict[str, int] = {}

    for project_name in await list_dir(root):
        project_path = root / project_name
        if not project_path.is_dir():
            continue

        project_counts[project_name] = 0
        for file_name in await list_dir(project_path):
            file_path = project_path / file_name
            if not file_name.endswith(".md") or not file_path.is_file():
                continue

            if not include_empty:
                try:
                    if not _has_content(await read_text(file_path)):
                        continue
                except OSError as e:
                    logger.warning("branch_note_read_failed", path=str(file_path), error=str(e))
                    continue

            branch_name = file_name[:-3]
            branch_groups.setdefault(branch_name, []).append(BranchNoteInfo(
                project_name=project_name,
                branch_name=branch_name,
                file_path=file_path,
                is_current_project=current_project == project_name,
            ))
            project_counts[project_name] += 1

    return branch_groups, project_counts


async def list_all_branch_notes(current_project: str | None = None, include_empty: bool = False) -> str:
    """List branch notes across projects grouped by branch: main, stage, then alphabetical."""
    if not get_branch_notes_root().is_dir():
        return "No branch notes directory found. Create some branch notes first."

    branch_groups, project_counts = await collect_branch_notes(current_project, include_empty)
    total_files = sum(len(notes) for notes in branch_groups.values())
    if total_files == 0:
        return "No branch notes found. Create some branch notes first using update_branch_note."

    sorted_branches = sorted(branch_groups, key=_branch_sort_key)

    output = "# All Branch Notes\n\n"
    output += (
        f"**Summary:** {total_files} branch notes across {len(sorted_branches)} branches "
        f"in {len(project_counts)} projects\n\n"
    )

    output += "**Projects:**\n"
    for project, count in sorted(project_counts.items()):
        marker = " ← Current" if current_project == project else ""
        output += f"- {project}: {count} branches{marker}\n"
    output += "\n---\n\n"

    for branch_name in sorted_branches:
        output += f"## Branch: {branch_name}\n\n"
        for note in sorted(branch_groups[branch_name], key=lambda n: n.project_name):
            marker = " ★" if note.is_current_project else ""
            output += f"- **{note.project_name}**{marker}\n"
            output += f"  - Path: `{note.file_path}`\n"
        output += "\n"

    return output
