"""
Context file functions for Cursor-Cortex MCP Server.

A context file describes the feature or pipeline a branch works on. Reads
from another project carry a warning so agents notice they left their
project.
"""

import re

import structlog

from .config import get_context_file_path, get_context_root, sanitize_name
from .models import ContextFileInfo, ContextInfo
from .utils import (
    TITLE_HEADING_PATTERN,
    NoteNotFoundError,
    current_timestamp,
    list_dir,
    read_text,
    read_text_or_none,
    validate_content_size,
    validate_name,
    write_text,
)

logger = structlog.get_logger(__name__)

CONTEXT_SUFFIX = "_context.md"
DESCRIPTION_PATTERN = re.compile(r'^## Description[ \t]*\n(.*?)(?=\n## |\n---|\Z)', re.MULTILINE | re.DOTALL)


def is_external_project(current_project: str | None, project: str) -> bool:
    """True when a file belongs to a project other than the caller's."""
    if not current_project:
        return False
    return current_project != project and current_project != "all"


def render_context_file(
    project_name: str,
    branch_name: str,
    title: str,
    description: str,
    additional_info: str | None = None,
    related_projects: list[str] | None = None,
) -> str:
    content = f"# {title}\n\n"
    content += f"## Description\n{description}\n\n"

    if additional_info:
        content += f"## Additional Information\n{additional_info}\n\n"

    if related_projects:
        content += "## Related Projects\n"
        for project in related_projects:
            content += f"- {project}\n"
        content += "\n"

    content += f"---\nLast Updated: {current_timestamp()}\n"
    content += f"Branch: {branch_name}\n"
    content += f"Project: {project_name}\n"
    return content


async def update_context_file(
    project_name: str,
    branch_name: str,
    title: str,
    description: str,
    additional_info: str | None = None,
    related_projects: list[str] | None = None,
) -> str:
    """Write (replace) the context file of a branch."""
    project_name = validate_name(project_name, "Project name")
    branch_name = validate_name(branch_name, "Branch name")
    content = render_context_file(project_name, branch_name, title, description, additional_info, related_projects)
    validate_content_size(content)

    file_path = get_context_file_path(project_name, branch_name)
    await write_text(file_path, content)
    logger.info("context_file_updated", project=project_name, branch=branch_name)

    return f'Successfully updated context file for "{title}"'


async def read_context_file(project_name: str, branch_name: str, current_project: str | None = None) -> list[str]:
    """Return the text blocks of a context file: an optional warning, then the labelled content."""
    content = await read_text_or_none(get_context_file_path(project_name, branch_name))
    if content is None:
        raise NoteNotFoundError(
            f'No context file exists yet for branch "{branch_name}" in project "{project_name}". '
            "Use update_context_file to create one."
        )

    blocks: list[str] = []
    if is_external_project(current_project, project_name):
        logger.info("external_context_read", project=project_name, current_project=current_project)
        blocks.append(
            f'⚠️ WARNING: You are accessing a context file from project "{project_name}" '
            f'while working in project "{current_project}". ⚠️\n\n'
        )
    blocks.append(f"[Project: {project_name}]\n{content}")
    return blocks


async def collect_context_files(
    project_name: str | None,
    list_all: bool = False,
    current_project: str | None = None,
) -> list[ContextFileInfo]:
    """Find context files for one project, or for every project when list_all is set."""
    root = get_context_root()
    if list_all:
        projects = [p for p in await list_dir(root) if (root / p).is_dir()]
    else:
        projects = [sanitize_name(project_name)] if project_name else []

    results: list[ContextFileInfo] = []
    for project in projects:
        for file_name in await list_dir(root / project):
            if not file_name.endswith(CONTEXT_SUFFIX):
                continue

            branch = file_name[:-len(CONTEXT_SUFFIX)]
            file_path = root / project / file_name

            title = branch
            try:
                match = TITLE_HEADING_PATTERN.search(await read_text(file_path))
                if match:
                    title = match.group(1).strip()
            except OSError as e:
                logger.warning("context_file_read_failed", path=str(file_path), error=str(e))

            results.append(ContextFileInfo(
                project=project,
                branch=branch,
                title=title,
                path=file_path,
                is_external=is_external_project(current_project, project),
            ))
    return results


async def list_context_files(
    project_name: str | None,
    list_all: bool = False,
    current_project: str | None = None,
) -> str:
    """Markdown listing of context files grouped by project."""
    files = await collect_context_files(project_name, list_all, current_project)
    if not files:
        suffix = f' for project "{project_name}"' if project_name and not list_all else ""
        return f"No context files found{suffix}."

    by_project: dict[str, list[ContextFileInfo]] = {}
    for info in files:
        by_project.setdefault(info.project, []).append(info)

    output = "# Available Context Files\n\n"
    for project, infos in by_project.items():
        marker = " (EXTERNAL PROJECT)" if is_external_project(current_project, project) else ""
        output += f"## Project: {project}{marker}\n\n"
        for info in infos:
            output += f"- Branch: {info.branch}, Title: {info.title}\n"
        output += "\n"
    return output


def parse_context_info(content: str, fallback_title: str) -> ContextInfo:
    """Pull the title and description out of a context file."""
    title_match = TITLE_HEADING_PATTERN.search(content)
    description_match = DESCRIPTION_PATTERN.search(content)
    return ContextInfo(
        title=title_match.group(1).strip() if title_match else fallback_title,
        description=description_match.group(1).strip() if description_match else "No description available",
        raw_content=content,
    )


async def get_project_context(project_name: str) -> ContextInfo:
    """Context of a project: its main/master branch context file, else the first one found."""
    context_dir = get_context_root() / sanitize_name(project_name)
    files = [f for f in await list_dir(context_dir) if f.endswith(CONTEXT_SUFFIX)]

    chosen = next((f for f in files if "main" in f or "master" in f), files[0] if files else None)
    if chosen is None:
        return ContextInfo(title=project_name, description="No context information available")

    return parse_context_info(await read_text(context_dir / chosen), project_name)
