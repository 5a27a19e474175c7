"""
Tool argument models for Cursor-Cortex MCP Server.

Every tool has a pydantic request model. Fields are snake_case in Python
and camelCase on the wire. decode_arguments turns whatever a client sent
(an object, a JSON string, a double-encoded JSON string or a bare string)
into the tool's model.
"""

import json
from typing import Any, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .config import DIRECT_STRING_BINDINGS
from .utils import ValidationError

logger = structlog.get_logger(__name__)

BRANCH = "Name of the branch"
PROJECT = "Name of the project"
CURRENT_PROJECT = "Name of the current project (for cross-project warnings and highlighting)"


class ToolArguments(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class BranchArguments(ToolArguments):
    branch_name: str = Field(description=BRANCH)
    project_name: str = Field(description=PROJECT)


# ============== Branch Notes ==============

class UpdateBranchNoteArgs(BranchArguments):
    message: str = Field(description="Description of the changes made")


class AddCommitSeparatorArgs(BranchArguments):
    commit_hash: str = Field(description="Git commit hash")
    commit_message: str = Field(description="Git commit message")


class FilterBranchNoteArgs(BranchArguments):
    commit_hash: str | None = Field(None, description="Show the entries recorded before a specific commit (by hash)")
    before_date: str | None = Field(None, description="Show entries strictly before this date (YYYY-MM-DD)")
    after_date: str | None = Field(None, description="Show entries strictly after this date (YYYY-MM-DD)")
    uncommitted_only: bool | None = Field(
        None,
        description="Show only work after the last commit separator; defaults to true unless a filter is given",
    )


class ReadBranchNoteArgs(BranchArguments):
    pass


class ArchiveBranchNoteArgs(BranchArguments):
    archive_date: str | None = Field(None, description="Date for the archive in YYYY-MM-DD format (default: today)")


class ClearBranchNoteArgs(BranchArguments):
    create_archive: bool = Field(True, description="Whether to create an archive before clearing")
    keep_header: bool = Field(True, description="Whether to keep the branch note header")


class ListAllBranchNotesArgs(ToolArguments):
    current_project: str | None = Field(None, description=CURRENT_PROJECT)
    include_empty: bool = Field(False, description="Whether to include branches with no content")


# ============== Generators ==============

class GenerateCommitMessageArgs(BranchArguments):
    jira_ticket: str | None = Field(None, description="Optional Jira ticket ID to include")


class GenerateJiraCommentArgs(BranchArguments):
    ticket_id: str = Field(description="Jira ticket ID to reference")
    jira_base_url: str | None = Field(None, description="Base URL of the Jira instance")


# ============== Context Files ==============

class UpdateContextFileArgs(BranchArguments):
    title: str = Field(description="Title of the feature or pipeline")
    description: str = Field(description="Description of what the feature or pipeline does")
    additional_info: str | None = Field(None, description="Any additional information to include")
    related_projects: list[str] | None = Field(None, description="List of related projects")


class ReadContextFileArgs(BranchArguments):
    current_project: str | None = Field(None, description=CURRENT_PROJECT)


class ListContextFilesArgs(ToolArguments):
    project_name: str | None = Field(None, description=PROJECT)
    list_all: bool = Field(False, description="List context files across all projects")
    current_project: str | None = Field(None, description=CURRENT_PROJECT)


# ============== Checklists ==============

class CreateCompletionChecklistArgs(ToolArguments):
    project_name: str = Field(description=PROJECT)
    feature_name: str = Field(description="Name of the feature or module")
    owner: str = Field(description="Person responsible for completing this checklist")
    requirements: str = Field(description="Key requirements, one per line")
    objectives: str = Field(description="Main objectives, one per line")
    test_criteria: str | None = Field(None, description="Criteria for successful testing, one per line")
    knowledge_items: str | None = Field(None, description="Knowledge items that should be documented, one per line")
    jira_ticket: str | None = Field(None, description="Associated Jira ticket ID")


class ReadChecklistArgs(ToolArguments):
    project_name: str = Field(description=PROJECT)
    checklist_name: str = Field("list", description="Name of the checklist, or 'list' to see all checklists")


class UpdateChecklistArgs(ToolArguments):
    project_name: str = Field(description=PROJECT)
    checklist_name: str = Field(description="Name of the checklist to update")
    item_path: str | None = Field(None, description="Item to update, e.g. 'Requirements.1' for the first requirement")
    status: bool | None = Field(None, description="New status of the item (true = completed)")
    auto_update: bool = Field(False, description="Tick items based on the branch context file and branch note")
    branch_name: str = Field("main", description="Branch used for auto-update")


class SignOffChecklistArgs(ToolArguments):
    project_name: str = Field(description=PROJECT)
    checklist_name: str = Field(description="Name of the checklist to sign off")
    sign_off_item: str = Field(description="Which item to sign off (Implementation, Testing, Knowledge, Approval)")
    signature_name: str = Field(description="Name of the person signing off")


# ============== Tacit Knowledge ==============

class CreateTacitKnowledgeArgs(ToolArguments):
    title: str = Field(description="Concise descriptive title of the knowledge")
    author: str = Field(description="Name of knowledge contributor")
    project_name: str = Field(description=PROJECT)
    branch_name: str | None = Field(None, description="Branch name if relevant")
    tags: str | None = Field(None, description="Comma-separated keywords")
    problem_statement: str = Field(description="The problem or situation that required expertise")
    environment: str | None = Field(None, description="Relevant system state, configurations and versions")
    constraints: str | None = Field(None, description="Limitations that influenced the approach")
    approach: str = Field(description="The approach taken to solve the problem")
    outcome: str = Field(description="The result of applying this knowledge")
    related_documentation: str | None = Field(None, description="Links to related documentation or tickets")


class ReadTacitKnowledgeArgs(ToolArguments):
    project_name: str = Field(description=PROJECT)
    document_name: str = Field("list", description="Name of the document, or 'list' to see all documents")
    search_term: str | None = Field(None, description="Term to search for across documents")
    search_tags: str | None = Field(None, description="Comma-separated tags; a document matches if it has any")
    cross_project: bool = Field(True, description="Whether to list and search across all projects")


# ============== Knowledge Archaeology ==============

class EnhancedBranchSurveyArgs(ToolArguments):
    current_project: str | None = Field(None, description=CURRENT_PROJECT)
    include_analysis: bool = Field(True, description="Include completeness scoring and readiness assessment")
    min_completeness_score: float = Field(0, ge=0, le=100, description="Minimum completeness score to include")
    detect_relationships: bool = Field(True, description="Detect cross-branch relationships")


class ConstructProjectNarrativeArgs(ToolArguments):
    project_name: str = Field(description="Name of the project to construct the narrative for")
    branch_name: str | None = Field(None, description="Limit the narrative to one branch (default: every branch)")
    include_knowledge: bool = Field(True, description="Include tacit knowledge documents")
    include_context: bool = Field(True, description="Include project context information")
    narrative_type: Literal["full", "technical", "executive"] = Field("full", description="Sections to render")


REQUEST_MODELS: dict[str, type[ToolArguments]] = {
    "update_branch_note": UpdateBranchNoteArgs,
    "add_commit_separator": AddCommitSeparatorArgs,
    "filter_branch_note": FilterBranchNoteArgs,
    "read_branch_note": ReadBranchNoteArgs,
    "update_context_file": UpdateContextFileArgs,
    "read_context_file": ReadContextFileArgs,
    "list_context_files": ListContextFilesArgs,
    "generate_commit_message": GenerateCommitMessageArgs,
    "generate_jira_comment": GenerateJiraCommentArgs,
    "create_tacit_knowledge": CreateTacitKnowledgeArgs,
    "create_completion_checklist": CreateCompletionChecklistArgs,
    "read_checklist": ReadChecklistArgs,
    "update_checklist": UpdateChecklistArgs,
    "sign_off_checklist": SignOffChecklistArgs,
    "read_tacit_knowledge": ReadTacitKnowledgeArgs,
    "archive_branch_note": ArchiveBranchNoteArgs,
    "clear_branch_note": ClearBranchNoteArgs,
    "list_all_branch_notes": ListAllBranchNotesArgs,
    "enhanced_branch_survey": EnhancedBranchSurveyArgs,
    "construct_project_narrative": ConstructProjectNarrativeArgs,
}


def input_schema(name: str) -> dict[str, Any]:
    """JSON schema of a tool's arguments, camelCase property names."""
    schema = REQUEST_MODELS[name].model_json_schema(by_alias=True)
    schema.pop("title", None)
    return schema


def _unwrap(name: str, raw: str) -> Any:
    """Parse a JSON string, unwrapping once more if it decodes to another string."""
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return raw
    if isinstance(parsed, str):
        try:
            parsed = json.loads(parsed)
            logger.debug("arguments_double_unwrapped", tool=name)
        except json.JSONDecodeError:
            pass
    return parsed


def decode_arguments(name: str, raw: Any) -> ToolArguments:
    """Build the request model of a tool from raw client arguments.

    Raises:
        ValidationError: If the tool is unknown or the arguments do not fit its model
    """
    model = REQUEST_MODELS.get(name)
    if model is None:
        raise ValidationError(f"Unknown tool: {name}")

    data = _unwrap(name, raw) if isinstance(raw, str) else raw
    if data is None:
        data = {}

    if isinstance(data, str):
        binding = DIRECT_STRING_BINDINGS.get(name)
        if binding is None:
            raise ValidationError(f"Tool {name} does not accept a plain string argument")
        logger.debug("arguments_bound_from_string", tool=name, param=binding["param"])
        data = {**binding["defaults"], binding["param"]: data}

    if not isinstance(data, dict):
        raise ValidationError(f"Invalid arguments for {name}: expected an object")

    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid arguments for {name}: {e}") from e
