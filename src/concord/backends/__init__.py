"""Backend clients for Concord."""

from concord.backends.base import BackendClient, CLIBackend
from concord.backends.catalog import build_catalog, classify_tier, resolve_default_backends
from concord.backends.claude import ClaudeBackend
from concord.backends.codex import CodexBackend
from concord.backends.detector import BackendDetector, DetectedBackend
from concord.backends.gemini import GeminiBackend

__all__ = [
    "BackendClient",
    "BackendDetector",
    "CLIBackend",
    "ClaudeBackend",
    "CodexBackend",
    "DetectedBackend",
    "GeminiBackend",
    "build_catalog",
    "classify_tier",
    "resolve_default_backends",
]
