"""
Heuristic scoring for Knowledge Archaeology reports.

Pure functions of branch-note text, kept apart from file I/O so the keyword
lists and weights can be tuned in one place.
"""

import re

from .models import Relationship
from .utils import TICKET_PATTERN, TIMESTAMP_PATTERN

WORD_SPLIT_PATTERN = re.compile(r'\s+')

PRODUCTION_INDICATORS = [
    "completed", "deployed", "merged", "production", "released", "finished",
    "implemented", "tested", "validated", "approved", "live",
]
DEVELOPMENT_INDICATORS = [
    "working on", "in progress", "todo", "draft", "testing", "prototype",
    "experimenting", "trying", "investigating", "planning",
]
FEATURE_KEYWORDS = ["feature", "enhancement", "improvement", "fix", "bug"]
TECHNOLOGY_KEYWORDS = ["sql", "python", "databricks", "docker", "git", "mcp", "node.js", "javascript"]

# Survey tiers
HIGH_SCORE = 70
MEDIUM_SCORE = 30


def word_count(text: str) -> int:
    return len(WORD_SPLIT_PATTERN.split(text))


def piece_count(text: str) -> int:
    """Number of non-empty pieces when splitting on '## ', header included."""
    return len([piece for piece in text.split("## ") if piece])


def completeness_score(text: str) -> int:
    """Documentation completeness from 0 to 100.

    Up to 30 points for entries (5 each), up to 25 for length (one per ten
    words), 20 for commit separators, 15 for dates, 10 for more than ten
    non-blank lines.
    """
    lines = [line for line in text.split("\n") if line.strip()]

    score = min(piece_count(text) * 5, 30)
    score += min(word_count(text) / 10, 25)
    score += 20 if "COMMIT:" in text else 0
    score += 15 if TIMESTAMP_PATTERN.search(text) else 0
    score += 10 if len(lines) > 10 else 0
    return round(min(score, 100))


def production_readiness(text: str) -> str:
    """Classify as 'Production', 'Development' or 'Mixed'.

    One side wins when its indicator count exceeds 1.5 times the other's.
    """
    lower = text.lower()
    prod = sum(1 for word in PRODUCTION_INDICATORS if word in lower)
    dev = sum(1 for word in DEVELOPMENT_INDICATORS if word in lower)

    if prod > dev * 1.5:
        return "Production"
    if dev > prod * 1.5:
        return "Development"
    return "Mixed"


def detect_relationships(text: str) -> list[Relationship]:
    """Tickets, feature types and technologies mentioned in the text."""
    lower = text.lower()
    relationships = [
        Relationship(type="ticket", value=ticket, confidence="high")
        for ticket in dict.fromkeys(TICKET_PATTERN.findall(text))
    ]
    relationships += [
        Relationship(type="feature_type", value=keyword, confidence="medium")
        for keyword in FEATURE_KEYWORDS if keyword in lower
    ]
    relationships += [
        Relationship(type="technology", value=tech, confidence="medium")
        for tech in TECHNOLOGY_KEYWORDS if tech in lower
    ]
    return relationships


def score_tier(score: int) -> str:
    if score >= HIGH_SCORE:
        return "high"
    if score >= MEDIUM_SCORE:
        return "medium"
    return "low"


def complexity_level(text: str) -> str:
    """'high' above 5000 words, 'medium' above 1000, else 'low'."""
    words = len(text.split())
    if words > 5000:
        return "high"
    if words > 1000:
        return "medium"
    return "low"
