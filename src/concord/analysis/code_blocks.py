"""Fenced code block extraction and code complexity scoring."""

from __future__ import annotations

import re

from concord.models.analysis import CodeBlock, Complexity

# Opening fence with optional language tag, body, closing fence. Matches are
# non-overlapping so a closing fence is never reused as an opener.
FENCE_PATTERN = re.compile(r"```([^\s`]*)[ \t]*\n(.*?)```", re.DOTALL)

DEFAULT_LANGUAGE = "plaintext"

# (pattern, points) scored once per block that matches
COMPLEXITY_RULES = [
    (re.compile(r"\b(?:for|while|foreach)\b"), 1),
    (re.compile(r"\b(?:if|else|switch)\b"), 1),
    (re.compile(r"\b(?:class|function|def|async)\b"), 1),
    (re.compile(r"\b(?:try|catch|except|exception)\b"), 2),
    (re.compile(r"\b(?:recursion|recursive)\b"), 3),
]

HIGH_COMPLEXITY_SCORE = 6
MEDIUM_COMPLEXITY_SCORE = 3


def extract_code_blocks(text: str, source_backend_id: str = "unknown") -> tuple[CodeBlock, ...]:
    """Return every fenced code region in ``text`` in document order."""
    return tuple(
        CodeBlock(
            code=match.group(2).strip(),
            language=match.group(1).lower() or DEFAULT_LANGUAGE,
            source_backend_id=source_backend_id,
        )
        for match in FENCE_PATTERN.finditer(text)
    )


def strip_code_blocks(text: str, replacement: str = "") -> str:
    return FENCE_PATTERN.sub(replacement, text)


def complexity_score(blocks: tuple[CodeBlock, ...]) -> int:
    score = 0
    for block in blocks:
        code = block.code.lower()
        score += sum(points for pattern, points in COMPLEXITY_RULES if pattern.search(code))
    return score


def assess_code_complexity(text: str) -> Complexity:
    """Bucket the code in a response; prose is ignored and no code is Low."""
    blocks = extract_code_blocks(text)
    if not blocks:
        return Complexity.LOW

    score = complexity_score(blocks)
    if score >= HIGH_COMPLEXITY_SCORE:
        return Complexity.HIGH
    if score >= MEDIUM_COMPLEXITY_SCORE:
        return Complexity.MEDIUM
    return Complexity.LOW
