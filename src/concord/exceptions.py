"""Custom exception hierarchy for Concord."""

from __future__ import annotations

from concord.models.response import ErrorKind


class ConcordError(Exception):
    """Base exception for all Concord errors."""


class BackendError(ConcordError):
    """A single backend failed to produce text.

    Always recovered into an error-tagged response by the executor.
    """

    kind: ErrorKind = ErrorKind.BACKEND_UNAVAILABLE

    def __init__(self, backend_id: str, message: str):
        self.backend_id = backend_id
        self.message = message
        super().__init__(f"[{backend_id}] {message}")


class BackendUnavailableError(BackendError):
    """Raised when a backend is missing, times out or exits with an error."""

    kind = ErrorKind.BACKEND_UNAVAILABLE


class BackendThrottledError(BackendError):
    """Raised when a backend hits an API rate limit."""

    kind = ErrorKind.BACKEND_THROTTLED

    def __init__(self, backend_id: str, message: str = "", retry_after: float | None = None):
        self.retry_after = retry_after
        msg = message or "hit rate limit"
        if retry_after is not None:
            msg += f" (retry after {retry_after:.0f}s)"
        super().__init__(backend_id, msg)


class BackendBlockedError(BackendError):
    """Raised when a backend refuses the prompt on policy grounds."""

    kind = ErrorKind.BACKEND_BLOCKED


class RequestCancelledError(BackendError):
    """Raised when the shared cancellation signal fires before completion."""

    kind = ErrorKind.CANCELLED

    def __init__(self, backend_id: str):
        super().__init__(backend_id, "Request cancelled")


class InsufficientBackendsError(ConcordError):
    """Raised before fan-out when fewer than two backends can be resolved."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(
            f"At least 2 backends are required for a comparison, {count} available."
        )


class InsufficientDataForAnalysisError(ConcordError):
    """Raised when fewer than two successful responses are available."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(
            f"Analysis requires at least 2 successful responses, got {count}."
        )


class UnknownPromptError(ConcordError):
    """Raised when adding a backend to a session that has no prompt."""

    def __init__(self):
        super().__init__("No previous prompt found. Run a comparison first.")


class MalformedUpstreamPayloadError(ConcordError):
    """Raised when structured model output cannot be parsed."""

    def __init__(self, message: str, raw_output: str = ""):
        self.raw_output = raw_output
        super().__init__(message)


class ConfigError(ConcordError):
    """Raised when configuration loading or validation fails."""


class NoBackendsDetectedError(ConcordError):
    """Raised when no AI CLI backends are found on the system."""

    def __init__(self):
        super().__init__(
            "No AI CLI backends detected. Install at least two of:\n"
            "  - Claude Code: https://docs.anthropic.com/en/docs/claude-code\n"
            "  - Gemini CLI:  https://github.com/google-gemini/gemini-cli\n"
            "  - Codex CLI:   https://github.com/openai/codex"
        )
