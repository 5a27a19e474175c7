"""
Project narrative construction for Cursor-Cortex MCP Server.

Builds a story of a project from its branch notes, tacit knowledge and
context file: a timeline of entries and commits, the technical journey,
business value, key decisions, production readiness and an executive
summary. Timeline and achievements come from the section parser; the
remaining parts are keyword heuristics over the combined text.
"""

import re
from datetime import datetime
from enum import Enum

import structlog
from pydantic import BaseModel

from .branch_notes import load_sections
from .config import get_branch_notes_root, sanitize_name
from .context_files import get_project_context
from .knowledge import get_project_knowledge_text
from .models import ContextInfo, Section, TimelineEvent
from .scoring import complexity_level
from .utils import NoteNotFoundError, list_dir, parse_timestamp, read_text

logger = structlog.get_logger(__name__)

ARCHITECTURE_KEYWORDS = [
    "microservices", "monolith", "api", "database", "cache", "queue",
    "docker", "kubernetes", "serverless", "event-driven", "mcp", "node.js",
]
PROBLEM_KEYWORDS = ["issue", "problem", "bug", "error", "challenge", "limitation"]
SOLUTION_KEYWORDS = ["solved", "fixed", "implemented", "resolved", "approach", "solution"]
IMPACT_KEYWORDS = [
    "efficiency", "performance", "scalability", "reliability", "security",
    "user experience", "cost reduction", "automation", "productivity",
]
PRODUCTION_SIGNALS = [
    "deployed", "production", "live", "released", "shipping",
    "testing", "qa", "staging", "integration",
]
DEPLOYMENT_KEYWORDS = ["deploy", "release", "launch", "rollout"]

DECISION_PATTERNS = [
    re.compile(r'decided to (.+?)(?:\.|$)', re.IGNORECASE | re.MULTILINE),
    re.compile(r'chose (.+?) because (.+?)(?:\.|$)', re.IGNORECASE | re.MULTILINE),
    re.compile(r'approach(?:ed)? (.+?) by (.+?)(?:\.|$)', re.IGNORECASE | re.MULTILINE),
    re.compile(r'implemented (.+?) to (.+?)(?:\.|$)', re.IGNORECASE | re.MULTILINE),
]

MILESTONE_LENGTH = 120


class NarrativeType(str, Enum):
    FULL = "full"
    TECHNICAL = "technical"
    EXECUTIVE = "executive"


class Decision(BaseModel):
    decision: str
    reasoning: str | None = None


class Narrative(BaseModel):
    """Every part of a project narrative, before rendering."""

    project_name: str
    timeline: list[TimelineEvent]
    architecture: list[str]
    problem_solving: list[str]
    objectives: list[str]
    impacts: list[tuple[str, str]]
    decisions: list[Decision]
    readiness: str
    deployment_context: list[str]
    project_overview: str
    complexity: str
    documentation_health: str
    key_achievements: list[str]


# ============== Data Gathering ==============

async def gather_branch_sections(project_name: str, branch_name: str | None = None) -> dict[str, list[Section]]:
    """Parsed sections per branch of a project, or of a single branch."""
    if branch_name:
        branches = [sanitize_name(branch_name)]
    else:
        project_dir = get_branch_notes_root() / sanitize_name(project_name)
        branches = [f[:-3] for f in await list_dir(project_dir) if f.endswith(".md")]

    result: dict[str, list[Section]] = {}
    for branch in branches:
        try:
            result[branch] = await load_sections(project_name, branch)
        except (NoteNotFoundError, OSError) as e:
            logger.warning("narrative_branch_skipped", project=project_name, branch=branch, error=str(e))
    return result


async def gather_branch_text(project_name: str, branches: list[str]) -> str:
    """Branch notes concatenated under '=== BRANCH: <name> ===' banners."""
    project_dir = get_branch_notes_root() / sanitize_name(project_name)
    text = ""
    for branch in branches:
        text += f"\n\n=== BRANCH: {branch} ===\n\n"
        text += await read_text(project_dir / f"{branch}.md")
    return text


# ============== Heuristics ==============

def extract_context_around_keyword(content: str, keyword: str, context_length: int = 100) -> list[str]:
    """Each line mentioning keyword joined with its neighbours.

    Snippets of 10 characters or fewer, or longer than twice context_length,
    are dropped.
    """
    lines = content.split("\n")
    keyword = keyword.lower()
    contexts = []
    for index, line in enumerate(lines):
        if keyword not in line.lower():
            continue
        snippet = " ".join(lines[max(0, index - 1):index + 2]).strip()
        if 10 < len(snippet) <= context_length * 2:
            contexts.append(snippet)
    return contexts


def _event_sort_key(event: TimelineEvent) -> tuple[int, datetime]:
    parsed = parse_timestamp(event.date)
    return (0, parsed) if parsed else (1, datetime.min)


def construct_timeline(branch_sections: dict[str, list[Section]]) -> list[TimelineEvent]:
    """Commits and entries of every branch in chronological order."""
    events = []
    for branch, sections in branch_sections.items():
        for section in sections:
            if section.is_commit:
                events.append(TimelineEvent(
                    type="commit",
                    date=section.timestamp,
                    branch=branch,
                    hash=section.short_hash,
                    description=section.commit_message,
                    significance="high",
                ))
            elif section.summary:
                events.append(TimelineEvent(
                    type="milestone",
                    date=section.timestamp,
                    branch=branch,
                    description=section.summary[:MILESTONE_LENGTH],
                ))
    # stable sort keeps file order for equal or unparsable dates
    events.sort(key=_event_sort_key)
    return events


def identify_key_decisions(content: str) -> list[Decision]:
    decisions = []
    for pattern in DECISION_PATTERNS:
        for match in pattern.finditer(content):
            reasoning = match.group(2) if pattern.groups > 1 else None
            decisions.append(Decision(decision=match.group(1).strip(), reasoning=reasoning))
    return decisions


def assess_readiness(content: str) -> str:
    lower = content.lower()
    score = sum(1 for signal in PRODUCTION_SIGNALS if signal in lower)
    if score >= 4:
        return "high"
    if score >= 2:
        return "medium"
    return "low"


def construct_project_narrative_data(
    project_name: str,
    branch_sections: dict[str, list[Section]],
    branch_text: str,
    knowledge_text: str = "",
    context: ContextInfo | None = None,
) -> Narrative:
    content = branch_text + "\n" + knowledge_text
    lower = content.lower()

    architecture = [
        keyword for keyword in ARCHITECTURE_KEYWORDS
        if keyword in lower and extract_context_around_keyword(content, keyword, 100)
    ]

    problem_solving = []
    for keyword in PROBLEM_KEYWORDS:
        for snippet in extract_context_around_keyword(content, keyword, 150):
            if any(solution in snippet.lower() for solution in SOLUTION_KEYWORDS):
                problem_solving.append(snippet)

    impacts = [
        (keyword, snippet)
        for keyword in IMPACT_KEYWORDS
        for snippet in extract_context_around_keyword(content, keyword, 100)
    ]
    deployment_context = [
        snippet
        for keyword in DEPLOYMENT_KEYWORDS
        for snippet in extract_context_around_keyword(content, keyword, 100)
    ]

    achievements: list[str] = []
    for sections in branch_sections.values():
        for section in sections:
            message = section.commit_message.strip()
            if section.is_commit and len(message) > 5 and message not in achievements:
                achievements.append(message)

    words = len((branch_text + knowledge_text).split())

    return Narrative(
        project_name=project_name,
        timeline=construct_timeline(branch_sections),
        architecture=architecture,
        problem_solving=problem_solving,
        objectives=[context.description] if context and context.description else [],
        impacts=impacts,
        decisions=identify_key_decisions(content),
        readiness=assess_readiness(content),
        deployment_context=deployment_context,
        project_overview=context.title if context else "Technical Implementation Project",
        complexity=complexity_level(branch_text + knowledge_text),
        documentation_health="good" if words > 500 else "needs attention",
        key_achievements=achievements,
    )


# ============== Rendering ==============

def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else f"{text[:limit]}..."


def _render_executive_summary(n: Narrative) -> str:
    output = "## 🎯 Executive Summary\n\n"
    output += f"**Project**: {n.project_overview}\n"
    output += f"**Complexity**: {n.complexity}\n"
    output += f"**Documentation Health**: {n.documentation_health}\n\n"
    if n.key_achievements:
        output += "**Key Achievements**:\n"
        output += "".join(f"- {achievement}\n" for achievement in n.key_achievements[:5])
        output += "\n"
    return output


def _render_timeline(n: Narrative) -> str:
    if not n.timeline:
        return ""
    output = "## ⏱️ Project Timeline\n\n"
    for event in n.timeline:
        if event.type == "commit":
            output += f"- **{event.date}**: Commit {event.hash} ({event.branch})"
            output += f" - {event.description}\n" if event.description else "\n"
        else:
            output += f"- **{event.date}** ({event.branch}): {event.description}\n"
    return output + "\n"


def _render_technical_journey(n: Narrative) -> str:
    output = "## 🛠️ Technical Journey\n\n"
    if n.architecture:
        output += "**Architecture & Technology**:\n"
        output += "".join(f"- **{tech}**: Used in project context\n" for tech in n.architecture)
        output += "\n"
    if n.problem_solving:
        output += "**Problem Solving Highlights**:\n"
        output += "".join(f"- {_clip(snippet, 150)}\n" for snippet in n.problem_solving[:3])
        output += "\n"
    return output


def _render_business_value(n: Narrative) -> str:
    if not n.objectives and not n.impacts:
        return ""
    output = "## 💼 Business Value\n\n"
    output += "".join(f"**Objective**: {objective}\n\n" for objective in n.objectives)
    output += "".join(f"- **{kind}**: {_clip(snippet, 100)}\n" for kind, snippet in n.impacts[:5])
    return output + "\n"


def _render_production_story(n: Narrative) -> str:
    output = "## 🚀 Production Readiness\n\n"
    output += f"**Status**: {n.readiness} readiness\n"
    if n.deployment_context:
        output += "**Deployment Context**:\n"
        output += "".join(f"- {_clip(snippet, 100)}\n" for snippet in n.deployment_context[:3])
    return output + "\n"


def _render_decisions(n: Narrative) -> str:
    if not n.decisions:
        return ""
    output = "## 🎯 Key Technical Decisions\n\n"
    for decision in n.decisions[:5]:
        output += f"- **Decision**: {decision.decision}\n"
        if decision.reasoning:
            output += f"  - **Reasoning**: {decision.reasoning}\n"
    return output + "\n"


RENDERERS = {
    NarrativeType.FULL: [
        _render_executive_summary, _render_timeline, _render_technical_journey,
        _render_business_value, _render_production_story, _render_decisions,
    ],
    NarrativeType.TECHNICAL: [_render_timeline, _render_technical_journey, _render_decisions],
    NarrativeType.EXECUTIVE: [_render_executive_summary, _render_business_value, _render_production_story],
}


def format_narrative(narrative: Narrative, narrative_type: NarrativeType = NarrativeType.FULL) -> str:
    output = f"# 📖 Project Narrative: {narrative.project_name}\n\n"
    output += "".join(render(narrative) for render in RENDERERS[narrative_type])
    output += "---\n\n"
    output += "💡 **Generated by Knowledge Archaeology**\n"
    return output


async def construct_project_narrative(
    project_name: str,
    branch_name: str | None = None,
    include_knowledge: bool = True,
    include_context: bool = True,
    narrative_type: str = "full",
) -> str:
    """Assemble and render the narrative of a project, optionally of one branch only."""
    kind = NarrativeType(narrative_type)

    branch_sections = await gather_branch_sections(project_name, branch_name)
    branch_text = await gather_branch_text(project_name, list(branch_sections))
    knowledge_text = await get_project_knowledge_text(project_name) if include_knowledge else ""
    context = await get_project_context(project_name) if include_context else None

    if not branch_sections and not knowledge_text:
        return f'No branch notes or knowledge documents found for project "{project_name}".'

    narrative = construct_project_narrative_data(project_name, branch_sections, branch_text, knowledge_text, context)
    logger.info(
        "narrative_constructed",
        project=project_name,
        branches=len(branch_sections),
        events=len(narrative.timeline),
        narrative_type=kind.value,
    )
    return format_narrative(narrative, kind)
