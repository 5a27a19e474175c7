"""
MCP Tools module for Cursor-Cortex MCP Server.

Contains the MCP tool handlers (list_tools and call_tool) and the
branch-note index resource.
"""

import json

import structlog
from mcp.server import Server
from mcp.types import (
    Resource,
    TextContent,
    Tool,
)

from .arguments import REQUEST_MODELS, decode_arguments, input_schema
from .branch_notes import (
    append_commit_separator,
    append_entry,
    archive_branch_note,
    clear_branch_note,
    collect_branch_notes,
    filter_branch_note,
    list_all_branch_notes,
    read_branch_note,
)
from .checklists import (
    create_completion_checklist,
    read_checklist,
    sign_off_checklist,
    update_checklist,
)
from .context_files import list_context_files, read_context_file, update_context_file
from .generators import generate_commit_message, generate_jira_comment
from .knowledge import create_tacit_knowledge, read_tacit_knowledge
from .narrative import construct_project_narrative
from .survey import enhanced_branch_survey
from .utils import NoteNotFoundError, ToolError

logger = structlog.get_logger(__name__)

BRANCH_NOTES_URI = "cortex://branch-notes"

TOOL_DESCRIPTIONS = {
    "update_branch_note": "Add a timestamped entry to the branch note of a project branch.",
    "add_commit_separator": "Mark a git commit in the branch note so later entries count as uncommitted work.",
    "filter_branch_note": (
        "Show uncommitted work (entries after the last commit separator), "
        "or entries filtered by commit hash or date range."
    ),
    "read_branch_note": "Read the full branch note of a project branch.",
    "update_context_file": "Write the context file describing what a branch works on.",
    "read_context_file": "Read the context file of a branch, warning when it belongs to another project.",
    "list_context_files": "List context files of a project or of every project.",
    "generate_commit_message": "Draft a commit message from the work recorded since the last commit.",
    "generate_jira_comment": "Draft a Jira comment summarizing the branch note entries.",
    "create_tacit_knowledge": "Capture tacit knowledge (problem, approach, outcome) as a tagged document.",
    "create_completion_checklist": "Create a completion checklist with objectives, requirements and sign-off.",
    "read_checklist": "Read a completion checklist, or list checklists with 'list'.",
    "update_checklist": "Tick or untick a checklist item, or auto-update items from branch activity.",
    "sign_off_checklist": "Sign off one checklist item (Implementation, Testing, Knowledge, Approval).",
    "read_tacit_knowledge": "List, search (by term or tags) or read tacit knowledge documents.",
    "archive_branch_note": "Archive the branch note under a date and reset it to its header.",
    "clear_branch_note": "Clear the branch note, archiving it first by default.",
    "list_all_branch_notes": "List branch notes across all projects grouped by branch (main, stage, then alphabetical).",
    "enhanced_branch_survey": (
        "Knowledge Archaeology survey of every branch note: completeness scoring, "
        "production readiness and cross-branch relationships."
    ),
    "construct_project_narrative": (
        "Knowledge Archaeology narrative of a project: timeline, technical journey, "
        "business value, key decisions and production readiness."
    ),
}

# Initialize server
server = Server("cursor-cortex")


def _text(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(name=name, description=TOOL_DESCRIPTIONS[name], inputSchema=input_schema(name))
        for name in REQUEST_MODELS
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Handle tool calls.

    Missing notes and documents are reported as plain text. Storage
    failures are logged and re-raised as ToolError, invalid input as
    ValidationError; the server turns both into error results.
    """
    if name not in REQUEST_MODELS:
        return _text(f"Unknown tool: {name}")

    args = decode_arguments(name, arguments)
    logger.debug("tool_called", tool=name)

    try:
        return await _dispatch(name, args)
    except NoteNotFoundError as e:
        return _text(str(e))
    except OSError as e:
        logger.error("tool_io_failed", tool=name, error=str(e))
        raise ToolError(f"Error running {name}: {e}") from e


async def _dispatch(name: str, args) -> list[TextContent]:
    if name == "update_branch_note":
        return _text(await append_entry(args.project_name, args.branch_name, args.message))

    elif name == "add_commit_separator":
        return _text(await append_commit_separator(
            args.project_name, args.branch_name, args.commit_hash, args.commit_message
        ))

    elif name == "filter_branch_note":
        return _text(await filter_branch_note(
            args.project_name,
            args.branch_name,
            commit_hash=args.commit_hash,
            before_date=args.before_date,
            after_date=args.after_date,
            uncommitted_only=args.uncommitted_only,
        ))

    elif name == "read_branch_note":
        return _text(await read_branch_note(args.project_name, args.branch_name))

    elif name == "archive_branch_note":
        return _text(await archive_branch_note(args.project_name, args.branch_name, args.archive_date))

    elif name == "clear_branch_note":
        return _text(await clear_branch_note(
            args.project_name, args.branch_name, args.create_archive, args.keep_header
        ))

    elif name == "list_all_branch_notes":
        return _text(await list_all_branch_notes(args.current_project, args.include_empty))

    elif name == "generate_commit_message":
        return _text(await generate_commit_message(args.project_name, args.branch_name, args.jira_ticket))

    elif name == "generate_jira_comment":
        comment, ticket_url = await generate_jira_comment(
            args.project_name, args.branch_name, args.ticket_id, args.jira_base_url
        )
        output = _text(comment)
        if ticket_url:
            output += _text(f"Ticket URL: {ticket_url}")
        return output

    elif name == "update_context_file":
        return _text(await update_context_file(
            args.project_name,
            args.branch_name,
            args.title,
            args.description,
            args.additional_info,
            args.related_projects,
        ))

    elif name == "read_context_file":
        blocks = await read_context_file(args.project_name, args.branch_name, args.current_project)
        return [TextContent(type="text", text=block) for block in blocks]

    elif name == "list_context_files":
        return _text(await list_context_files(args.project_name, args.list_all, args.current_project))

    elif name == "create_completion_checklist":
        return _text(await create_completion_checklist(
            args.project_name,
            args.feature_name,
            args.owner,
            args.requirements,
            args.objectives,
            args.test_criteria,
            args.knowledge_items,
            args.jira_ticket,
        ))

    elif name == "read_checklist":
        return _text(await read_checklist(args.project_name, args.checklist_name))

    elif name == "update_checklist":
        return _text(await update_checklist(
            args.project_name,
            args.checklist_name,
            item_path=args.item_path,
            status=args.status,
            auto_update=args.auto_update,
            branch_name=args.branch_name,
        ))

    elif name == "sign_off_checklist":
        return _text(await sign_off_checklist(
            args.project_name, args.checklist_name, args.sign_off_item, args.signature_name
        ))

    elif name == "create_tacit_knowledge":
        return _text(await create_tacit_knowledge(
            args.title,
            args.author,
            args.project_name,
            args.problem_statement,
            args.approach,
            args.outcome,
            branch_name=args.branch_name,
            tags=args.tags,
            environment=args.environment,
            constraints=args.constraints,
            related_documentation=args.related_documentation,
        ))

    elif name == "read_tacit_knowledge":
        return _text(await read_tacit_knowledge(
            args.project_name,
            args.document_name,
            args.search_term,
            args.search_tags,
            args.cross_project,
        ))

    elif name == "enhanced_branch_survey":
        return _text(await enhanced_branch_survey(
            args.current_project,
            args.include_analysis,
            args.min_completeness_score,
            args.detect_relationships,
        ))

    elif name == "construct_project_narrative":
        return _text(await construct_project_narrative(
            args.project_name,
            args.branch_name,
            args.include_knowledge,
            args.include_context,
            args.narrative_type,
        ))

    return _text(f"Unknown tool: {name}")


# ============== Resources ==============

async def branch_note_index() -> dict:
    """Projects and their branch notes, empty notes included."""
    branch_groups, project_counts = await collect_branch_notes(include_empty=True)
    projects: dict[str, list[str]] = {project: [] for project in sorted(project_counts)}
    for branch, notes in branch_groups.items():
        for note in notes:
            projects[note.project_name].append(branch)
    return {
        "projects": {project: sorted(branches) for project, branches in projects.items()},
        "total_branch_notes": sum(len(branches) for branches in projects.values()),
    }


@server.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    return [
        Resource(
            uri=BRANCH_NOTES_URI,
            name="Branch Notes",
            description="Index of projects and their branch notes",
            mimeType="application/json"
        ),
    ]


@server.read_resource()
async def read_resource(uri) -> str:
    """Read a resource."""
    if str(uri).rstrip("/") == BRANCH_NOTES_URI:
        return json.dumps(await branch_note_index(), indent=2)

    return json.dumps({"error": f"Unknown resource: {uri}"})
