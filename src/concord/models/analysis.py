"""Immutable analysis result models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class Complexity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class DepthLevel(str, Enum):
    BASIC = "Basic"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


@dataclass(frozen=True)
class CodeBlock:
    """A fenced code region extracted from a response."""

    code: str
    language: str = "plaintext"
    source_backend_id: str = "unknown"
    explanation: str | None = None


@dataclass(frozen=True)
class KeyDifference:
    aspect: str
    description: str


@dataclass(frozen=True)
class CodeAnalysis:
    """Per-backend code summary."""

    block_count: int
    languages: frozenset[str]
    complexity: Complexity


def _freeze(mapping: Mapping | None) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class AnalysisResult:
    """Comparison of a set of successful responses.

    Never mutated once computed; a changed response set yields a new result.
    ``unique_points``, ``summary`` and ``recommendations`` are only filled by
    the model-assisted review.
    """

    overall_similarity: float
    common_points: tuple[str, ...] = ()
    key_differences: tuple[KeyDifference, ...] = ()
    code_analysis: Mapping[str, CodeAnalysis] = field(default_factory=dict)
    unique_points: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    summary: str | None = None
    recommendations: str | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.overall_similarity <= 1.0:
            raise ValueError(f"overall_similarity out of range: {self.overall_similarity}")
        object.__setattr__(self, "common_points", tuple(self.common_points))
        object.__setattr__(self, "key_differences", tuple(self.key_differences))
        object.__setattr__(self, "code_analysis", _freeze(self.code_analysis))
        object.__setattr__(
            self,
            "unique_points",
            _freeze({k: tuple(v) for k, v in (self.unique_points or {}).items()}),
        )

    @classmethod
    def degraded(cls) -> AnalysisResult:
        """Default result used when upstream analysis output is unusable."""
        return cls(overall_similarity=0.0)


@dataclass(frozen=True)
class ExplanationSections:
    """Prose structure of a single response."""

    introduction: str | None
    code_blocks: tuple[CodeBlock, ...]
    key_points: tuple[str, ...]
    conclusion: str | None = None


@dataclass(frozen=True)
class ExplanationQuality:
    backend_id: str
    clarity_score: int
    code_examples: int
    depth_level: DepthLevel
