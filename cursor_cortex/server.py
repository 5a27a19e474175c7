"""
Cursor-Cortex MCP Server

Stores branch notes, context files, completion checklists and tacit
knowledge as markdown under ~/.cursor-cortex and serves them over MCP.

This module re-exports the public API of the package modules.
"""

from .arguments import REQUEST_MODELS, decode_arguments, input_schema
from .branch_notes import (
    append_commit_separator,
    append_entry,
    archive_branch_note,
    clear_branch_note,
    collect_branch_notes,
    filter_branch_note,
    list_all_branch_notes,
    load_sections,
    read_branch_note,
)
from .checklists import (
    auto_update_lines,
    create_completion_checklist,
    find_item_line,
    read_checklist,
    render_checklist,
    sign_off_checklist,
    update_checklist,
)
from .config import (
    DIRECT_STRING_BINDINGS,
    get_branch_note_archive_path,
    get_branch_note_path,
    get_context_file_path,
    sanitize_name,
    settings,
)
from .context_files import (
    get_project_context,
    list_context_files,
    parse_context_info,
    read_context_file,
    update_context_file,
)
from .generators import COMMIT_INSTRUCTION, generate_commit_message, generate_jira_comment
from .knowledge import (
    create_tacit_knowledge,
    extract_tags,
    read_tacit_knowledge,
    search_knowledge_docs,
)
from .main import main
from .narrative import (
    construct_project_narrative,
    construct_timeline,
    extract_context_around_keyword,
)
from .scoring import completeness_score, detect_relationships, production_readiness
from .sections import (
    filter_by_commit,
    filter_by_date,
    parse_sections,
    uncommitted_sections,
)
from .survey import enhanced_branch_survey
from .tools import call_tool, list_resources, list_tools, read_resource, server
from .utils import (
    ContentValidationError,
    CortexError,
    DocumentNotFoundError,
    NoteNotFoundError,
    PathValidationError,
    ToolError,
    ValidationError,
)

__all__ = [
    "COMMIT_INSTRUCTION",
    "DIRECT_STRING_BINDINGS",
    "REQUEST_MODELS",
    "ContentValidationError",
    "CortexError",
    "DocumentNotFoundError",
    "NoteNotFoundError",
    "PathValidationError",
    "ToolError",
    "ValidationError",
    "append_commit_separator",
    "append_entry",
    "archive_branch_note",
    "auto_update_lines",
    "call_tool",
    "clear_branch_note",
    "collect_branch_notes",
    "completeness_score",
    "construct_project_narrative",
    "construct_timeline",
    "create_completion_checklist",
    "create_tacit_knowledge",
    "decode_arguments",
    "detect_relationships",
    "enhanced_branch_survey",
    "extract_context_around_keyword",
    "extract_tags",
    "filter_branch_note",
    "filter_by_commit",
    "filter_by_date",
    "find_item_line",
    "generate_commit_message",
    "generate_jira_comment",
    "get_branch_note_archive_path",
    "get_branch_note_path",
    "get_context_file_path",
    "get_project_context",
    "input_schema",
    "list_all_branch_notes",
    "list_context_files",
    "list_resources",
    "list_tools",
    "load_sections",
    "main",
    "parse_context_info",
    "parse_sections",
    "production_readiness",
    "read_branch_note",
    "read_checklist",
    "read_context_file",
    "read_resource",
    "read_tacit_knowledge",
    "render_checklist",
    "sanitize_name",
    "search_knowledge_docs",
    "server",
    "settings",
    "sign_off_checklist",
    "uncommitted_sections",
    "update_checklist",
    "update_context_file",
]
