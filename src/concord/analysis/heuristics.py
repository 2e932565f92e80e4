"""Per-response explanation heuristics: sections, clarity, depth and approach.

Every function here is a pure function of the response text. The rules are
keyword and regex based so the scores can be explained to a user.
"""

from __future__ import annotations

import re

from concord.analysis.code_blocks import extract_code_blocks, strip_code_blocks
from concord.analysis.terms import extract_key_terms
from concord.models.analysis import DepthLevel, ExplanationSections

PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
SENTENCE_SPLIT = re.compile(r"[.!?]+")
LIST_ITEM_PATTERN = re.compile(r"^[ \t]*(?:[-*•]|\d+\.)[ \t]+(.+)$", re.MULTILINE)
HEADING_PATTERN = re.compile(r"^#{1,6}\s", re.MULTILINE)
EMPHASIS_PATTERN = re.compile(r"\b(?:important|key|note|remember|crucial|essential)\b", re.IGNORECASE)
EXEMPLAR_PATTERN = re.compile(r"\b(?:for example|such as|in other words)\b", re.IGNORECASE)
SEQUENCING_PATTERN = re.compile(r"\b(?:first|second|then|finally)\b", re.IGNORECASE)
ADVANCED_PATTERN = re.compile(r"\b(?:algorithms?|complexity|optimization|design patterns?)\b", re.IGNORECASE)
DEEP_CS_PATTERN = re.compile(
    r"\b(?:recursion|dynamic programming|big[- ]o|time complexity)\b", re.IGNORECASE
)

APPROACH_PATTERNS = [
    ("Object-Oriented", re.compile(r"\b(?:object[- ]oriented|class|inheritance)\b")),
    ("Functional", re.compile(r"\b(?:functional|lambda|map|filter|reduce)\b")),
    ("Procedural", re.compile(r"\b(?:procedural|step[- ]by[- ]step)\b")),
    ("Asynchronous", re.compile(r"\b(?:async|await|promise|callback)\b")),
]

MIN_INTRODUCTION_LENGTH = 50
MIN_KEY_SENTENCE_LENGTH = 20
MAX_KEY_POINTS = 5
MAX_KEY_SENTENCES = 3
LONG_SENTENCE_LENGTH = 100


def _paragraphs(text: str) -> list[str]:
    return [p.strip() for p in PARAGRAPH_SPLIT.split(text) if p.strip()]


def _sentences(text: str) -> list[str]:
    return [s.strip() for s in SENTENCE_SPLIT.split(text) if s.strip()]


def extract_key_points(text: str) -> tuple[str, ...]:
    """List items in document order, else sentences carrying emphasis words."""
    prose = strip_code_blocks(text)
    points = [m.group(1).strip() for m in LIST_ITEM_PATTERN.finditer(prose)]
    if points:
        return tuple(points[:MAX_KEY_POINTS])

    emphasised = [
        s for s in _sentences(prose)
        if len(s) > MIN_KEY_SENTENCE_LENGTH and EMPHASIS_PATTERN.search(s)
    ]
    return tuple(emphasised[:MAX_KEY_SENTENCES])


def extract_explanation(text: str) -> str | None:
    """First substantial prose paragraph, ignoring code."""
    paragraphs = _paragraphs(strip_code_blocks(text))
    return next((p for p in paragraphs if len(p) > MIN_INTRODUCTION_LENGTH), None)


def extract_explanation_sections(text: str, source_backend_id: str = "unknown") -> ExplanationSections:
    paragraphs = _paragraphs(strip_code_blocks(text))
    conclusion = paragraphs[-1] if len(paragraphs) > 1 else None
    return ExplanationSections(
        introduction=extract_explanation(text),
        code_blocks=extract_code_blocks(text, source_backend_id),
        key_points=extract_key_points(text),
        conclusion=conclusion,
    )


def mean_sentence_length(text: str) -> float:
    sentences = _sentences(text)
    if not sentences:
        return 0.0
    return sum(len(s) for s in sentences) / len(sentences)


def clarity_score(text: str) -> int:
    """Score 1-10 rewarding structure and explanatory phrasing."""
    score = 5
    if "```" in text:
        score += 1
    if HEADING_PATTERN.search(text):
        score += 1
    if LIST_ITEM_PATTERN.search(text):
        score += 1
    if EXEMPLAR_PATTERN.search(text):
        score += 1
    if SEQUENCING_PATTERN.search(text):
        score += 1
    if mean_sentence_length(text) > LONG_SENTENCE_LENGTH:
        score -= 1
    return max(1, min(10, score))


def assess_depth_level(text: str) -> DepthLevel:
    score = 0
    if ADVANCED_PATTERN.search(text):
        score += 2
    if DEEP_CS_PATTERN.search(text):
        score += 2
    if len(extract_key_terms(text)) > 10:
        score += 1
    if len(extract_code_blocks(text)) > 2:
        score += 1

    if score >= 4:
        return DepthLevel.ADVANCED
    if score >= 2:
        return DepthLevel.INTERMEDIATE
    return DepthLevel.BASIC


def identify_approaches(text: str) -> tuple[str, ...]:
    """Programming approach tags mentioned in ``text``, in fixed tag order."""
    lowered = text.lower()
    return tuple(tag for tag, pattern in APPROACH_PATTERNS if pattern.search(lowered))
