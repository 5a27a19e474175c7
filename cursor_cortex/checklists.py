"""
Completion checklist functions for Cursor-Cortex MCP Server.

Checklists are markdown files of "- [ ]" items under section headings with
a sign-off block at the end. Items can be ticked by path
("Requirements.2") or automatically from what the branch note and context
file mention.
"""

import re
from pathlib import Path

import structlog

from .config import (
    get_branch_note_path,
    get_checklist_dir,
    get_context_file_path,
    sanitize_name,
    settings,
)
from .utils import (
    CHECKBOX_PATTERN,
    NoteNotFoundError,
    ValidationError,
    current_date,
    list_dir,
    read_text_or_none,
    validate_content_size,
    validate_file_name,
    validate_name,
    validate_path_within_root,
    write_text,
)

logger = structlog.get_logger(__name__)

CHECKLIST_SUFFIX = "-checklist.md"

DEFAULT_KNOWLEDGE_ITEMS = [
    "Technical decisions and their rationale",
    "Implementation challenges and solutions",
    "Lessons learned during development",
    "Areas for future improvement",
]

# Sign-off item -> label of its line in the sign-off block
SIGN_OFF_LABELS = {
    "Implementation": "Implementation Complete",
    "Testing": "Testing Complete",
    "Knowledge": "Knowledge Documented",
    "Approval": "Project Owner Approval",
}

# Checklist topic -> phrases that show the topic was worked on
AUTO_UPDATE_PATTERNS = {
    "reading branch notes": ["read branch note", "read_branch_note", "branch notes", "viewing branch notes"],
    "reading context files": ["read context file", "read_context_file", "context files", "viewing context"],
    "reading checklists": ["read checklist", "read_checklist", "viewing checklist"],
    "technical decisions": ["architecture decision", "technical choice", "design decision", "technical approach"],
    "implementation challenges": ["challenge", "obstacle", "difficulty", "problem solved", "workaround"],
    "lessons learned": ["lesson", "learning", "insight", "discovered", "realization"],
    "future improvements": ["improvement", "enhancement", "future work", "todo", "next steps"],
}


def _checkbox_lines(text: str) -> str:
    return "\n".join(f"- [ ] {line}" for line in text.split("\n"))


def render_checklist(
    project_name: str,
    feature_name: str,
    owner: str,
    requirements: str,
    objectives: str,
    test_criteria: str | None = None,
    knowledge_items: str | None = None,
    jira_ticket: str | None = None,
    created: str | None = None,
) -> str:
    created = created or current_date()
    lines = [
        f"# Completion Checklist: {feature_name}",
        "",
        "## Project Information",
        f"- **Project:** {project_name}",
        f"- **Feature/Module:** {feature_name}",
        f"- **Owner:** {owner}",
        f"- **Creation Date:** {created}",
    ]
    if jira_ticket:
        lines.append(f"- **Jira Ticket:** {jira_ticket}")

    lines += [
        "",
        "## Objectives and Requirements",
        "",
        "### Objectives",
        _checkbox_lines(objectives),
        "",
        "### Requirements",
        _checkbox_lines(requirements),
        "",
    ]
    if test_criteria:
        lines += ["## Testing Criteria", _checkbox_lines(test_criteria), ""]

    lines += [
        "## Knowledge Capture Requirements",
        "",
        "### Knowledge Items to Document",
        _checkbox_lines(knowledge_items) if knowledge_items else _checkbox_lines("\n".join(DEFAULT_KNOWLEDGE_ITEMS)),
        "",
        "## Sign-off",
        "",
    ]
    for label in SIGN_OFF_LABELS.values():
        lines += [f"**{label}:** _____________ Date: _______", ""]

    lines += [
        "---",
        "",
        "*This checklist was created using the Cursor-Cortex knowledge management system.*",
        "",
    ]
    return "\n".join(lines)


async def create_completion_checklist(
    project_name: str,
    feature_name: str,
    owner: str,
    requirements: str,
    objectives: str,
    test_criteria: str | None = None,
    knowledge_items: str | None = None,
    jira_ticket: str | None = None,
) -> str:
    project_name = validate_name(project_name, "Project name")
    feature_name = validate_name(feature_name, "Feature name")

    created = current_date()
    content = render_checklist(
        project_name, feature_name, owner, requirements, objectives,
        test_criteria, knowledge_items, jira_ticket, created,
    )
    validate_content_size(content)

    file_path = get_checklist_dir(project_name) / f"{created}-{sanitize_name(feature_name)}{CHECKLIST_SUFFIX}"
    await write_text(file_path, content)
    logger.info("checklist_created", project=project_name, feature=feature_name)

    return f"Successfully created completion checklist: {file_path}"


async def resolve_checklist_path(project_name: str, checklist_name: str) -> Path:
    """Locate a checklist by exact file name or by partial name.

    Falls back to "<name>-checklist.md" when nothing matches.
    """
    checklist_name = validate_file_name(checklist_name, "Checklist name")
    checklist_dir = get_checklist_dir(project_name)

    if checklist_name.endswith(".md"):
        path = checklist_dir / checklist_name
    else:
        match = next(
            (f for f in await list_dir(checklist_dir) if checklist_name in f and f.endswith(CHECKLIST_SUFFIX)),
            None,
        )
        path = checklist_dir / (match or f"{checklist_name}{CHECKLIST_SUFFIX}")

    return validate_path_within_root(path, settings.storage_root)


def _not_found(project_name: str, checklist_name: str) -> NoteNotFoundError:
    return NoteNotFoundError(f"Checklist not found: {checklist_name} for project {project_name}.")


async def read_checklist(project_name: str, checklist_name: str = "list") -> str:
    """Read one checklist, or list the project's checklists when checklist_name is 'list'."""
    if checklist_name == "list":
        checklists = [f for f in await list_dir(get_checklist_dir(project_name)) if f.endswith(CHECKLIST_SUFFIX)]
        if not checklists:
            return f"No checklists found for project {project_name}."
        formatted = "\n".join(f"- {name}" for name in checklists)
        return f"# Available Checklists for {project_name}\n\n{formatted}"

    content = await read_text_or_none(await resolve_checklist_path(project_name, checklist_name))
    if content is None:
        raise _not_found(project_name, checklist_name)
    return content


def find_item_line(lines: list[str], item_path: str) -> int:
    """Index of the checkbox line addressed by 'Section.N' (N counts from 1).

    Raises:
        ValidationError: If the path is malformed or addresses no item
    """
    section, _, index_str = item_path.partition(".")
    try:
        index = int(index_str) - 1
    except ValueError:
        index = -1
    if not section or index < 0:
        raise ValidationError(
            f"Invalid item path: {item_path}. Format should be 'Section.Number' (e.g., 'Requirements.1')"
        )

    in_section = False
    count = 0
    for i, line in enumerate(lines):
        if line.startswith("##"):
            in_section = section.lower() in line.lower()
            count = 0
            continue
        if in_section and re.match(r'- \[[ x]\]', line.strip()):
            if count == index:
                return i
            count += 1

    raise ValidationError(f"Could not find item at path {item_path}")


def auto_update_lines(lines: list[str], evidence: str) -> tuple[list[str], list[str]]:
    """Tick unchecked items whose topic shows up in the evidence text.

    Returns (updated lines, texts of the items that were ticked).
    """
    evidence = evidence.lower()
    active = {
        topic: phrases
        for topic, phrases in AUTO_UPDATE_PATTERNS.items()
        if any(phrase in evidence for phrase in phrases)
    }

    updated = list(lines)
    ticked: list[str] = []
    for i, line in enumerate(lines):
        match = CHECKBOX_PATTERN.search(line)
        if not match or match.group(1) == "x":
            continue
        item_text = match.group(2).lower()
        for topic, phrases in active.items():
            if topic in item_text or any(phrase in item_text for phrase in phrases):
                updated[i] = line.replace("- [ ]", "- [x]", 1)
                ticked.append(match.group(2).strip())
                break
    return updated, ticked


async def update_checklist(
    project_name: str,
    checklist_name: str,
    item_path: str | None = None,
    status: bool | None = None,
    auto_update: bool = False,
    branch_name: str = "main",
) -> str:
    """Tick or untick a checklist item, or auto-tick items from branch activity."""
    checklist_path = await resolve_checklist_path(project_name, checklist_name)
    content = await read_text_or_none(checklist_path)
    if content is None:
        raise _not_found(project_name, checklist_name)

    lines = content.split("\n")

    if auto_update:
        context = await read_text_or_none(get_context_file_path(project_name, branch_name)) or ""
        branch_note = await read_text_or_none(get_branch_note_path(project_name, branch_name)) or ""
        if not context and not branch_note:
            logger.info("auto_update_no_evidence", project=project_name, branch=branch_name)

        updated_lines, ticked = auto_update_lines(lines, context + branch_note)
        if ticked:
            report = f"Auto-updated {len(ticked)} items based on branch context and notes:\n- " + "\n- ".join(ticked)
        else:
            report = "No items were auto-updated. No matching activities found in branch context and notes."
    elif item_path and status is not None:
        target = find_item_line(lines, item_path)
        updated_lines = list(lines)
        if status:
            updated_lines[target] = updated_lines[target].replace("- [ ]", "- [x]", 1)
        else:
            updated_lines[target] = updated_lines[target].replace("- [x]", "- [ ]", 1)
        ticked = [updated_lines[target]]
        report = f"Updated item at {item_path} to {'completed' if status else 'not completed'}"
    else:
        raise ValidationError("Must specify either autoUpdate=true or provide itemPath and status")

    if ticked:
        await write_text(checklist_path, "\n".join(updated_lines))
        logger.info("checklist_updated", project=project_name, checklist=checklist_path.name, items=len(ticked))

    return f"{'Successfully updated' if ticked else 'No updates made to'} checklist: {checklist_name}\n\n{report}"


async def sign_off_checklist(project_name: str, checklist_name: str, sign_off_item: str, signature_name: str) -> str:
    """Fill the sign-off line of one item with the signer and today's date."""
    label = SIGN_OFF_LABELS.get(sign_off_item)
    if label is None:
        raise ValidationError(
            f"Invalid sign-off item: {sign_off_item}. Valid options are: {', '.join(SIGN_OFF_LABELS)}"
        )

    checklist_path = await resolve_checklist_path(project_name, checklist_name)
    content = await read_text_or_none(checklist_path)
    if content is None:
        raise _not_found(project_name, checklist_name)

    today = current_date()
    pattern = re.compile(rf'\*\*{re.escape(label)}:\*\* _+ Date: _+')
    signed = f"**{label}:** {signature_name} Date: {today}"
    updated, count = pattern.subn(lambda _: signed, content, count=1)
    if not count:
        raise ValidationError(f"{sign_off_item} has already been signed off in checklist: {checklist_name}")

    await write_text(checklist_path, updated)
    logger.info("checklist_signed_off", project=project_name, checklist=checklist_path.name, item=sign_off_item)

    return (
        f"Successfully signed off {sign_off_item} for checklist: {checklist_name} "
        f"by {signature_name} on {today}"
    )
