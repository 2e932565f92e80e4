"""Heuristic comparison of a set of backend responses.

Only successful responses take part. All functions are deterministic for a
given input and keep no state between calls.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Sequence
from dataclasses import replace
from itertools import combinations

from concord.analysis.code_blocks import assess_code_complexity, extract_code_blocks
from concord.analysis.heuristics import (
    assess_depth_level,
    clarity_score,
    extract_explanation,
    extract_explanation_sections,
    identify_approaches,
)
from concord.analysis.terms import MIN_TERM_LENGTH, extract_key_terms, jaccard
from concord.exceptions import InsufficientDataForAnalysisError
from concord.models.analysis import (
    AnalysisResult,
    CodeAnalysis,
    CodeBlock,
    ExplanationQuality,
    ExplanationSections,
    KeyDifference,
)
from concord.models.response import AIResponse

MIN_RESPONSES = 2
COMMON_TERM_RATIO = 0.7
MAX_COMMON_POINTS = 5
LENGTH_DISPARITY_RATIO = 1.5


def successful_responses(responses: Sequence[AIResponse]) -> list[AIResponse]:
    return [r for r in responses if r.ok]


def compute_analysis(responses: Sequence[AIResponse]) -> AnalysisResult:
    """Compare the successful responses in ``responses``.

    Raises:
        InsufficientDataForAnalysisError: Fewer than two successful responses.
    """
    usable = successful_responses(responses)
    if len(usable) < MIN_RESPONSES:
        raise InsufficientDataForAnalysisError(len(usable))

    return AnalysisResult(
        overall_similarity=calculate_similarity([r.text for r in usable]),
        common_points=find_common_points(usable),
        key_differences=find_key_differences(usable),
        code_analysis=analyze_code_blocks(usable),
    )


def calculate_similarity(texts: Sequence[str]) -> float:
    """Mean pairwise Jaccard index of the texts' significant terms."""
    term_sets = [extract_key_terms(t) for t in texts]
    pairs = list(combinations(term_sets, 2))
    if not pairs:
        return 1.0
    return sum(jaccard(a, b) for a, b in pairs) / len(pairs)


def find_common_points(responses: Sequence[AIResponse]) -> tuple[str, ...]:
    """Terms most responses mention plus code languages several responses use."""
    if len(responses) < MIN_RESPONSES:
        return ()

    threshold = math.ceil(COMMON_TERM_RATIO * len(responses))
    term_counts = Counter(term for r in responses for term in extract_key_terms(r.text))
    language_counts = Counter(
        language
        for r in responses
        for language in {block.language for block in extract_code_blocks(r.text)}
    )

    # (frequency, kind, name, description); terms rank before languages on ties
    ranked = [
        (count, 0, term, f"Shared mention of {term}")
        for term, count in term_counts.items()
        if count >= threshold and len(term) >= MIN_TERM_LENGTH
    ]
    ranked += [
        (count, 1, language, f"Shared use of {language} code")
        for language, count in language_counts.items()
        if count >= 2
    ]
    ranked.sort(key=lambda entry: (-entry[0], entry[1], entry[2]))
    return tuple(entry[3] for entry in ranked[:MAX_COMMON_POINTS])


def find_key_differences(responses: Sequence[AIResponse]) -> tuple[KeyDifference, ...]:
    if len(responses) < MIN_RESPONSES:
        return ()

    differences: list[KeyDifference] = []

    lengths = [len(r.text) for r in responses]
    max_length, min_length = max(lengths), min(lengths)
    if max_length > LENGTH_DISPARITY_RATIO * min_length:
        longer = responses[lengths.index(max_length)]
        shorter = responses[lengths.index(min_length)]
        differences.append(KeyDifference(
            aspect="Response Length",
            description=(
                f"{longer.display_name} provides a more detailed response "
                f"({max_length} chars vs {min_length} chars from {shorter.display_name})"
            ),
        ))

    complexities = [(r.display_name, assess_code_complexity(r.text)) for r in responses]
    if len({level for _, level in complexities}) > 1:
        listing = ", ".join(f"{name} ({level.value})" for name, level in complexities)
        differences.append(KeyDifference(
            aspect="Code Complexity",
            description=f"Different complexity levels: {listing}",
        ))

    approaches: list[str] = []
    for r in responses:
        for tag in identify_approaches(r.text):
            if tag not in approaches:
                approaches.append(tag)
    if len(approaches) > 1:
        differences.append(KeyDifference(
            aspect="Programming Approach",
            description=f"Different approaches used: {', '.join(approaches)}",
        ))

    return tuple(differences)


def analyze_code_blocks(responses: Sequence[AIResponse]) -> dict[str, CodeAnalysis]:
    analysis = {}
    for r in responses:
        blocks = extract_code_blocks(r.text, r.backend_id)
        analysis[r.backend_id] = CodeAnalysis(
            block_count=len(blocks),
            languages=frozenset(b.language for b in blocks),
            complexity=assess_code_complexity(r.text),
        )
    return analysis


def extract_all_code_blocks(responses: Sequence[AIResponse]) -> tuple[CodeBlock, ...]:
    """Every code block from the successful responses, tagged with its source."""
    blocks: list[CodeBlock] = []
    for r in successful_responses(responses):
        explanation = extract_explanation(r.text)
        blocks.extend(
            replace(block, explanation=explanation)
            for block in extract_code_blocks(r.text, r.backend_id)
        )
    return tuple(blocks)


def compare_explanation_quality(responses: Sequence[AIResponse]) -> tuple[ExplanationQuality, ...]:
    return tuple(
        ExplanationQuality(
            backend_id=r.backend_id,
            clarity_score=clarity_score(r.text),
            code_examples=len(extract_code_blocks(r.text)),
            depth_level=assess_depth_level(r.text),
        )
        for r in successful_responses(responses)
    )


def explain_responses(responses: Sequence[AIResponse]) -> dict[str, ExplanationSections]:
    """Explanation sections per backend, for the explanatory comparison mode."""
    return {
        r.backend_id: extract_explanation_sections(r.text, r.backend_id)
        for r in successful_responses(responses)
    }
