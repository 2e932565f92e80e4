"""Data models for Concord."""

from concord.models.analysis import (
    AnalysisResult,
    CodeAnalysis,
    CodeBlock,
    Complexity,
    DepthLevel,
    ExplanationQuality,
    ExplanationSections,
    KeyDifference,
)
from concord.models.config import AppConfig, BackendConfig, DisplayMode
from concord.models.response import AIResponse, BackendIdentity, ErrorKind, TierClass
from concord.models.session import ComparisonSession, ResponseStore, SessionSnapshot

__all__ = [
    "AIResponse",
    "AnalysisResult",
    "AppConfig",
    "BackendConfig",
    "BackendIdentity",
    "CodeAnalysis",
    "CodeBlock",
    "ComparisonSession",
    "Complexity",
    "DepthLevel",
    "DisplayMode",
    "ErrorKind",
    "ExplanationQuality",
    "ExplanationSections",
    "KeyDifference",
    "ResponseStore",
    "SessionSnapshot",
    "TierClass",
]
