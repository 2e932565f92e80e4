"""Significant-term extraction and set similarity."""

from __future__ import annotations

import re

WORD_PATTERN = re.compile(r"\b\w+\b")

MIN_TERM_LENGTH = 4

STOP_WORDS = frozenset({
    "the", "and", "for", "are", "but", "not", "you", "all", "can", "had",
    "her", "was", "one", "our", "out", "day", "get", "has", "him", "his",
    "how", "its", "may", "new", "now", "old", "see", "two", "who", "boy",
    "did", "does", "let", "put", "say", "she", "too", "use", "this", "that",
    "with", "from", "have", "will", "your", "they", "then", "than", "when",
    "what", "which", "there", "their", "about", "would", "these", "other",
})

PROGRAMMING_TERMS = frozenset({
    "function", "variable", "array", "object", "method", "class", "loop",
    "condition", "string", "number", "boolean", "algorithm", "code", "syntax",
    "parameter", "return", "import", "export", "const", "async", "await",
    "exception", "interface", "module", "library", "callback", "closure",
    "generator", "iterator", "recursive", "integer", "list", "dictionary",
    "tuple", "pointer", "thread", "query", "index", "hash", "stack", "queue",
})

TECHNICAL_TERMS = frozenset({
    "implementation", "optimization", "performance", "complexity",
    "efficiency", "recursion", "iteration", "debugging", "testing",
    "documentation", "architecture", "scalability", "concurrency",
    "security", "maintainability", "readability", "latency", "memory",
    "caching", "validation", "refactoring", "deployment",
})


def is_significant(word: str) -> bool:
    return (
        len(word) >= MIN_TERM_LENGTH
        and word not in STOP_WORDS
        and (word in PROGRAMMING_TERMS or word in TECHNICAL_TERMS)
    )


def extract_key_terms(text: str) -> frozenset[str]:
    """Return the set of significant programming/technical terms in ``text``."""
    return frozenset(w for w in WORD_PATTERN.findall(text.casefold()) if is_significant(w))


def jaccard(a: frozenset[str], b: frozenset[str]) -> float:
    """Jaccard index of two term sets; 0 when both are empty."""
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)
