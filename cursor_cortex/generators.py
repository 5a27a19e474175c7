"""
Commit message and Jira comment generators for Cursor-Cortex MCP Server.

Both read the branch note through the section parser and only draft text;
nothing is committed and no ticket is updated.
"""

import structlog

from .branch_notes import load_sections
from .sections import entries_only, uncommitted_sections
from .utils import NoteNotFoundError

logger = structlog.get_logger(__name__)

COMMIT_INSTRUCTION = (
    "#IMPORTANT: Before generating any commit message, generate a better commit message "
    "that summarizes these changes into a single phrase:\n\n"
)


async def generate_commit_message(project_name: str, branch_name: str, jira_ticket: str | None = None) -> str:
    """Draft a commit message from the work recorded since the last commit separator."""
    try:
        sections = await load_sections(project_name, branch_name)
    except NoteNotFoundError:
        sections = []

    if not sections:
        return "No branch note entries found. Please add an entry with update_branch_note first."

    pending = uncommitted_sections(sections)
    if not pending:
        return "No changes since last commit"

    if len(pending) == 1:
        message = COMMIT_INSTRUCTION + pending[0].summary
    else:
        all_changes = "\n- ".join(section.summary for section in pending)
        message = (
            f"{COMMIT_INSTRUCTION}"
            f"Latest change: {pending[-1].summary}\n"
            f"Total changes since last commit: {len(pending)}\n\n"
            f"All changes:\n- {all_changes}"
        )

    if jira_ticket and jira_ticket not in message:
        message = f"[{jira_ticket}] {message}"

    logger.debug("commit_message_generated", project=project_name, branch=branch_name, changes=len(pending))
    return message


async def generate_jira_comment(
    project_name: str,
    branch_name: str,
    ticket_id: str,
    jira_base_url: str | None = None,
) -> tuple[str, str]:
    """Draft a Jira wiki-markup comment listing every entry of the branch note.

    Returns (comment, ticket_url); ticket_url is empty without a base URL.

    Raises:
        NoteNotFoundError: If the note is missing or has no entries
    """
    try:
        sections = await load_sections(project_name, branch_name)
    except NoteNotFoundError:
        raise NoteNotFoundError(
            f'No branch note exists yet for branch "{branch_name}" in project "{project_name}". '
            "Cannot generate Jira comment."
        )

    entries = entries_only(sections)
    if not entries:
        raise NoteNotFoundError("Branch note exists but has no entries. Cannot generate Jira comment.")

    comment = f"*Updates from branch: {branch_name}*\n\n"
    for entry in entries:
        comment += f"h5. {entry.header}\n{entry.message}\n\n"

    ticket_url = ""
    if jira_base_url:
        ticket_url = f"{jira_base_url.rstrip('/')}/browse/{ticket_id}"
        comment += f"\n[View ticket|{ticket_url}]"

    return comment, ticket_url
