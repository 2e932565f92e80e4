"""Pure, stateless comparison heuristics."""

from concord.analysis.code_blocks import assess_code_complexity, extract_code_blocks, strip_code_blocks
from concord.analysis.engine import (
    analyze_code_blocks,
    calculate_similarity,
    compare_explanation_quality,
    compute_analysis,
    explain_responses,
    extract_all_code_blocks,
    find_common_points,
    find_key_differences,
)
from concord.analysis.heuristics import (
    assess_depth_level,
    clarity_score,
    extract_explanation_sections,
    extract_key_points,
    identify_approaches,
)
from concord.analysis.payload import parse_review_payload
from concord.analysis.terms import extract_key_terms, jaccard

__all__ = [
    "analyze_code_blocks",
    "assess_code_complexity",
    "assess_depth_level",
    "calculate_similarity",
    "clarity_score",
    "compare_explanation_quality",
    "compute_analysis",
    "explain_responses",
    "extract_all_code_blocks",
    "extract_code_blocks",
    "extract_explanation_sections",
    "extract_key_points",
    "extract_key_terms",
    "find_common_points",
    "find_key_differences",
    "identify_approaches",
    "jaccard",
    "parse_review_payload",
    "strip_code_blocks",
]
