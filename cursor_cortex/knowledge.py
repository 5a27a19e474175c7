"""
Tacit knowledge document functions for Cursor-Cortex MCP Server.

Documents are dated markdown files per project carrying a Title and a
comma-separated Tags line that listing and search rely on.
"""

from pathlib import Path

import structlog

from .config import get_knowledge_dir, get_knowledge_root, sanitize_name, settings
from .models import KnowledgeDocInfo
from .utils import (
    KNOWLEDGE_TAGS_PATTERN,
    KNOWLEDGE_TITLE_PATTERN,
    ContentValidationError,
    DocumentNotFoundError,
    current_date,
    list_dir,
    read_text,
    read_text_or_none,
    validate_content_size,
    validate_file_name,
    validate_name,
    validate_path_within_root,
    write_text,
)

logger = structlog.get_logger(__name__)


def render_tacit_knowledge(
    title: str,
    author: str,
    project_name: str,
    problem_statement: str,
    approach: str,
    outcome: str,
    branch_name: str | None = None,
    tags: str | None = None,
    environment: str | None = None,
    constraints: str | None = None,
    related_documentation: str | None = None,
    captured: str | None = None,
) -> str:
    captured = captured or current_date()
    parts = [
        "# Tacit Knowledge Capture\n\n",
        "## Overview\n",
        f"This document captures tacit knowledge related to {title}.\n\n",
        "## Knowledge Details\n\n",
        "### Basic Information\n",
        f"**Title:** {title}  \n",
        f"**Date Captured:** {captured}  \n",
        f"**Author:** {author}  \n",
        f"**Project:** {project_name}  \n",
    ]
    if branch_name:
        parts.append(f"**Branch:** {branch_name}  \n")
    if tags:
        parts.append(f"**Tags:** {tags}  \n")

    parts += ["\n### Context\n", f"**Problem Statement:**  \n{problem_statement}\n\n"]
    if environment:
        parts.append(f"**Environment/Conditions:**  \n{environment}\n\n")
    if constraints:
        parts.append(f"**Constraints:**  \n{constraints}\n\n")

    parts += [
        "---\n\n",
        "## Knowledge Content\n\n",
        f"### Approach\n{approach}\n\n",
        "---\n\n",
        "## Outcomes and Learning\n\n",
        "### Results\n",
        f"**Outcome:**  \n{outcome}\n\n",
    ]
    if related_documentation:
        parts.append(f"### Knowledge Connection\n**Related Documentation:**  \n{related_documentation}\n\n")

    parts += [
        "---\n\n",
        "*This knowledge document was created using the Cursor-Cortex knowledge management system.*\n",
    ]
    return "".join(parts)


async def create_tacit_knowledge(
    title: str,
    author: str,
    project_name: str,
    problem_statement: str,
    approach: str,
    outcome: str,
    branch_name: str | None = None,
    tags: str | None = None,
    environment: str | None = None,
    constraints: str | None = None,
    related_documentation: str | None = None,
) -> str:
    project_name = validate_name(project_name, "Project name")
    if not title or not title.strip():
        raise ContentValidationError("Title cannot be empty")

    captured = current_date()
    content = render_tacit_knowledge(
        title, author, project_name, problem_statement, approach, outcome,
        branch_name, tags, environment, constraints, related_documentation, captured,
    )
    validate_content_size(content)

    file_path = get_knowledge_dir(project_name) / f"{captured}-{sanitize_name(title)}.md"
    await write_text(file_path, content)
    logger.info("tacit_knowledge_created", project=project_name, title=title, tags=tags)

    return f'Successfully created tacit knowledge document: "{title}" at {file_path}'


def extract_tags(content: str) -> list[str]:
    """Lower-cased tags from the '**Tags:**' line; empty when there is none."""
    match = KNOWLEDGE_TAGS_PATTERN.search(content)
    if not match or not match.group(1):
        return []
    return [tag.strip().lower() for tag in match.group(1).split(",") if tag.strip()]


def extract_title(content: str, fallback: str) -> str:
    match = KNOWLEDGE_TITLE_PATTERN.search(content)
    return match.group(1) if match else fallback


def _strip_md(file_name: str) -> str:
    return file_name[:-3] if file_name.endswith(".md") else file_name


async def list_knowledge_projects() -> list[str]:
    root = get_knowledge_root()
    return [p for p in await list_dir(root) if (root / p).is_dir()]


async def list_knowledge_docs(project_name: str) -> list[str]:
    return [f for f in await list_dir(get_knowledge_dir(project_name)) if f.endswith(".md")]


async def search_knowledge_docs(
    projects: list[str],
    search_term: str | None = None,
    search_tags: str | None = None,
) -> list[KnowledgeDocInfo]:
    """Documents containing the term (case-insensitive) and carrying any of the tags."""
    wanted_tags = [t.strip().lower() for t in search_tags.split(",") if t.strip()] if search_tags else []
    term = search_term.lower() if search_term else ""

    results: list[KnowledgeDocInfo] = []
    for project in projects:
        for doc in await list_knowledge_docs(project):
            doc_path = get_knowledge_dir(project) / doc
            try:
                content = await read_text(doc_path)
            except OSError as e:
                logger.warning("knowledge_doc_read_failed", path=str(doc_path), error=str(e))
                continue

            doc_tags = extract_tags(content)
            if term and term not in content.lower():
                continue
            if wanted_tags and not any(tag in doc_tags for tag in wanted_tags):
                continue

            results.append(KnowledgeDocInfo(
                project=project,
                document=doc,
                title=extract_title(content, _strip_md(doc)),
                tags=doc_tags,
            ))
    return results


async def resolve_document_path(project_name: str, document_name: str) -> Path:
    """Locate a document by exact file name or by partial name."""
    document_name = validate_file_name(document_name, "Document name")
    knowledge_dir = get_knowledge_dir(project_name)

    if document_name.endswith(".md"):
        path = knowledge_dir / document_name
    else:
        match = next((f for f in await list_knowledge_docs(project_name) if document_name in f), None)
        path = knowledge_dir / (match or f"{document_name}.md")

    return validate_path_within_root(path, settings.storage_root)


async def read_tacit_knowledge(
    project_name: str,
    document_name: str = "list",
    search_term: str | None = None,
    search_tags: str | None = None,
    cross_project: bool = True,
) -> str:
    """List, search or read tacit knowledge documents.

    A search term or tags always select search mode; otherwise 'list' lists
    and any other name reads that document.

    Raises:
        DocumentNotFoundError: If a named document does not exist
    """
    if document_name == "list" or search_term or search_tags:
        projects = await list_knowledge_projects() if cross_project else [sanitize_name(project_name)]

        if search_term or search_tags:
            results = await search_knowledge_docs(projects, search_term, search_tags)
            logger.debug("knowledge_search", term=search_term, tags=search_tags, matches=len(results))
            if not results:
                return "No knowledge documents found matching the search criteria."

            output = "# Knowledge Search Results\n\n"
            output += f"Found {len(results)} document(s) matching your criteria:\n\n"
            lines = []
            for result in results:
                tags = f" [Tags: {', '.join(result.tags)}]" if result.tags else ""
                lines.append(f"- **{result.title}** ({result.project}/{result.document}){tags}")
            return output + "\n".join(lines)

        if cross_project:
            by_project = {}
            for project in projects:
                docs = await list_knowledge_docs(project)
                if docs:
                    by_project[project] = docs
            total = sum(len(docs) for docs in by_project.values())
            if not total:
                return "No knowledge documents found across all projects."

            output = "# Available Knowledge Documents (All Projects)\n\n"
            output += f"Found {total} document(s) across {len(by_project)} project(s):\n\n"
            for project, docs in by_project.items():
                output += f"## Project: {project}\n\n"
                output += "".join(f"- {doc}\n" for doc in docs)
                output += "\n"
            return output

        docs = await list_knowledge_docs(project_name)
        if not docs:
            return f"No knowledge documents found for project {project_name}."
        formatted = "\n".join(f"- {doc}" for doc in docs)
        return f"# Available Knowledge Documents for {project_name}\n\n{formatted}"

    content = await read_text_or_none(await resolve_document_path(project_name, document_name))
    if content is None:
        raise DocumentNotFoundError(
            f'Knowledge document "{document_name}" not found for project {project_name}. '
            "Use documentName 'list' to see available documents."
        )
    return content


async def get_project_knowledge_text(project_name: str) -> str:
    """Every document of a project concatenated under '=== KNOWLEDGE: <name> ===' banners."""
    text = ""
    for doc in await list_knowledge_docs(project_name):
        text += f"\n\n=== KNOWLEDGE: {_strip_md(doc)} ===\n\n"
        text += await read_text(get_knowledge_dir(project_name) / doc)
    return text
