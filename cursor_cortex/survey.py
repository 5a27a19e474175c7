"""
Enhanced branch survey for Cursor-Cortex MCP Server.

Scores every non-empty branch note across projects and renders a Knowledge
Archaeology report: executive summary, per-project stats, shared tickets,
technology distribution, tiered branch listing and recommendations.
"""

from datetime import datetime

import structlog

from .branch_notes import collect_branch_notes
from .config import get_branch_notes_root
from .models import BranchAnalysis
from .scoring import (
    HIGH_SCORE,
    MEDIUM_SCORE,
    completeness_score,
    detect_relationships,
    piece_count,
    production_readiness,
    word_count,
)
from .utils import read_text

logger = structlog.get_logger(__name__)

MEDIUM_TIER_LIMIT = 10
LOW_TIER_LIMIT = 5
TOP_TECHNOLOGIES = 5


async def analyze_branches(
    current_project: str | None = None,
    include_analysis: bool = True,
    min_completeness_score: int = 0,
    detect_relations: bool = True,
) -> tuple[list[BranchAnalysis], list[str]]:
    """Analyze every branch note with content.

    Returns (analyses sorted by score, highest first; every project scanned).
    """
    branch_groups, project_counts = await collect_branch_notes(current_project, include_empty=False)

    analyses: list[BranchAnalysis] = []
    for notes in branch_groups.values():
        for note in notes:
            try:
                content = await read_text(note.file_path)
                mtime = note.file_path.stat().st_mtime
            except OSError as e:
                logger.warning("branch_analysis_failed", path=str(note.file_path), error=str(e))
                continue

            score = completeness_score(content) if include_analysis else 0
            if score < min_completeness_score:
                continue

            analyses.append(BranchAnalysis(
                project_name=note.project_name,
                branch_name=note.branch_name,
                is_current_project=note.is_current_project,
                completeness_score=score,
                production_readiness=production_readiness(content) if include_analysis else "Unknown",
                relationships=detect_relationships(content) if detect_relations else [],
                entry_count=piece_count(content),
                word_count=word_count(content),
                has_commit_separators="COMMIT:" in content,
                last_modified=datetime.fromtimestamp(mtime),
            ))

    analyses.sort(key=lambda a: (-a.completeness_score, a.project_name, a.branch_name))
    return analyses, sorted(project_counts)


def _percent(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole else 0


def render_survey(
    analyses: list[BranchAnalysis],
    projects: list[str],
    current_project: str | None = None,
    detect_relations: bool = True,
) -> str:
    total = len(analyses)
    avg_score = round(sum(a.completeness_score for a in analyses) / total) if total else 0
    production_count = sum(1 for a in analyses if a.production_readiness == "Production")

    output = "# 🔍 Enhanced Branch Survey - Knowledge Archaeology Report\n\n"

    output += "## 📊 Executive Summary\n\n"
    output += f"- **{total} branches** analyzed across **{len(projects)} projects**\n"
    output += f"- **Average Completeness Score**: {avg_score}/100\n"
    output += f"- **Production Ready**: {production_count} branches ({_percent(production_count, total)}%)\n\n"

    # Per-project stats
    stats = {}
    for project in projects:
        branches = [a for a in analyses if a.project_name == project]
        stats[project] = {
            "branches": len(branches),
            "average": round(sum(a.completeness_score for a in branches) / len(branches)) if branches else 0,
            "production": sum(1 for a in branches if a.production_readiness == "Production"),
            "development": sum(1 for a in branches if a.production_readiness == "Development"),
        }

    output += "## 🏗️ Project Analysis\n\n"
    for project, s in sorted(stats.items(), key=lambda item: -item[1]["average"]):
        marker = " ⭐ Current" if current_project == project else ""
        output += f"### {project}{marker}\n"
        output += f"- **Branches**: {s['branches']}\n"
        output += f"- **Avg Completeness**: {s['average']}/100\n"
        output += f"- **Production Ready**: {s['production']} | **In Development**: {s['development']}\n\n"

    # relationship key -> branches mentioning it
    shared: dict[tuple[str, str], list[str]] = {}
    for a in analyses:
        for rel in a.relationships:
            shared.setdefault((rel.type, rel.value), []).append(f"{a.project_name}/{a.branch_name}")

    if detect_relations and shared:
        output += "## 🔗 Cross-Branch Relationship Analysis\n\n"

        tickets = {k: v for k, v in shared.items() if k[0] == "ticket"}
        if tickets:
            output += "### 🎫 Tickets Found Across Branches\n"
            for (_, ticket), branches in tickets.items():
                if len(branches) > 1:
                    output += f"- **{ticket}**: Found in {len(branches)} branches\n"
                    output += "".join(f"  - {b}\n" for b in branches)
            output += "\n"

        technologies = sorted(
            ((value, branches) for (kind, value), branches in shared.items() if kind == "technology"),
            key=lambda item: -len(item[1]),
        )
        if technologies:
            output += "### 🛠️ Technology Stack Distribution\n"
            for tech, branches in technologies[:TOP_TECHNOLOGIES]:
                output += f"- **{tech}**: {len(branches)} branches\n"
            output += "\n"

    output += "## 📋 Detailed Branch Analysis\n\n"

    high = [a for a in analyses if a.completeness_score >= HIGH_SCORE]
    if high:
        output += f"### 🏆 High-Quality Documentation (Score ≥ {HIGH_SCORE})\n"
        for a in high:
            marker = " ⭐" if a.is_current_project else ""
            output += f"- **{a.project_name}/{a.branch_name}**{marker} - Score: {a.completeness_score}/100\n"
            output += f"  - Status: {a.production_readiness} | Entries: {a.entry_count} | Words: {a.word_count}\n"
            if a.relationships:
                output += f"  - Related: {', '.join(r.value for r in a.relationships)}\n"
        output += "\n"

    medium = [a for a in analyses if MEDIUM_SCORE <= a.completeness_score < HIGH_SCORE]
    if medium:
        output += f"### 📝 Medium Documentation (Score {MEDIUM_SCORE}-{HIGH_SCORE - 1})\n"
        for a in medium[:MEDIUM_TIER_LIMIT]:
            marker = " ⭐" if a.is_current_project else ""
            output += (
                f"- **{a.project_name}/{a.branch_name}**{marker} - Score: {a.completeness_score}/100 "
                f"({a.production_readiness})\n"
            )
        if len(medium) > MEDIUM_TIER_LIMIT:
            output += f"- ... and {len(medium) - MEDIUM_TIER_LIMIT} more\n"
        output += "\n"

    low = [a for a in analyses if a.completeness_score < MEDIUM_SCORE]
    if low:
        output += f"### ⚠️ Needs Attention (Score < {MEDIUM_SCORE})\n"
        output += f"Found {len(low)} branches with minimal documentation\n"
        for a in low[:LOW_TIER_LIMIT]:
            output += f"- {a.project_name}/{a.branch_name} (Score: {a.completeness_score})\n"
        output += "\n"

    recommendations = []
    if production_count:
        recommendations.append(
            f"**Production Consolidation**: {production_count} branches contain production-ready work "
            "that could be consolidated into main branch documentation"
        )
    if any(len(branches) > 1 for branches in shared.values()):
        recommendations.append(
            "**Cross-Branch Synthesis**: Multiple branches work on related tickets/features - "
            "consider consolidating related work"
        )
    if low:
        recommendations.append(
            f"**Documentation Enhancement**: {len(low)} branches need documentation improvement "
            "for better knowledge capture"
        )

    output += "## 💡 Knowledge Archaeology Recommendations\n\n"
    output += "".join(f"{i}. {text}\n" for i, text in enumerate(recommendations, start=1))
    output += "\n---\n\n"
    output += (
        "💡 **Next Steps**: Use findings to improve documentation completeness "
        "and production readiness across projects.\n"
    )
    return output


async def enhanced_branch_survey(
    current_project: str | None = None,
    include_analysis: bool = True,
    min_completeness_score: int = 0,
    detect_relations: bool = True,
) -> str:
    """Survey every branch note across projects."""
    if not get_branch_notes_root().is_dir():
        return "No branch notes directory found. Create some branch notes first."

    analyses, projects = await analyze_branches(
        current_project, include_analysis, min_completeness_score, detect_relations
    )
    logger.info("branch_survey_completed", branches=len(analyses), projects=len(projects))

    if not analyses:
        return "No branch notes with content found. Create some branch notes first using update_branch_note."

    return render_survey(analyses, projects, current_project, detect_relations)
