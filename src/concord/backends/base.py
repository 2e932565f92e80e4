"""Backend capability interface and the shared CLI subprocess implementation."""

from __future__ import annotations

import asyncio
import re
from abc import ABC, abstractmethod

from concord.exceptions import (
    BackendBlockedError,
    BackendThrottledError,
    BackendUnavailableError,
    RequestCancelledError,
)
from concord.logger import log
from concord.models.response import BackendIdentity, TierClass

# Patterns that indicate rate limiting across various CLI tools
RATE_LIMIT_PATTERNS = [
    re.compile(r"rate.?limit", re.IGNORECASE),
    re.compile(r"too many requests", re.IGNORECASE),
    re.compile(r"\b429\b"),
    re.compile(r"quota.?exceeded", re.IGNORECASE),
    re.compile(r"resource.?exhausted", re.IGNORECASE),
    re.compile(r"overloaded", re.IGNORECASE),
    re.compile(r"throttl", re.IGNORECASE),
    re.compile(r"retry.?after", re.IGNORECASE),
]

# Patterns that indicate a policy refusal
BLOCKED_PATTERNS = [
    re.compile(r"content.?policy", re.IGNORECASE),
    re.compile(r"request (?:was )?blocked", re.IGNORECASE),
    re.compile(r"safety (?:filter|block)", re.IGNORECASE),
]

RETRY_AFTER_PATTERN = re.compile(r"retry.?after[:\s]+(\d+(?:\.\d+)?)", re.IGNORECASE)

KILL_REAP_TIMEOUT = 5.0

_ANSI_PATTERN = re.compile(r"\x1b\[[0-9;]*[a-zA-Z]|\x1b\].*?\x07|\x1b\[.*?[@-~]")


class BackendClient(ABC):
    """A text-generation service the orchestrator can query."""

    @abstractmethod
    def identify(self) -> BackendIdentity:
        """Return the backend's id, display name and tier."""

    @abstractmethod
    async def submit(self, prompt: str, cancel: asyncio.Event) -> str:
        """Return the full response text for ``prompt``.

        Raises:
            BackendError: On timeout, throttling, policy block or missing backend.
        """

    @property
    def backend_id(self) -> str:
        return self.identify().id


class CLIBackend(BackendClient):
    """Backend that shells out to a vendor's AI CLI."""

    name: str
    display_name: str
    provider: str
    version_args: tuple[str, ...] = ("--version",)

    def __init__(self, binary_path: str, timeout: int = 300, auto_approve: bool = True,
                 default_model: str | None = None, extra_args: list[str] | None = None,
                 tier: TierClass = TierClass.STANDARD):
        self.binary_path = binary_path
        self.timeout = timeout
        self.auto_approve = auto_approve
        self.default_model = default_model
        self.extra_args = extra_args or []
        self.tier = tier

    def identify(self) -> BackendIdentity:
        if self.default_model:
            return BackendIdentity(
                id=f"{self.name}:{self.default_model}",
                display_name=f"{self.display_name} ({self.default_model})",
                tier_class=self.tier,
            )
        return BackendIdentity(id=self.name, display_name=self.display_name, tier_class=self.tier)

    @abstractmethod
    def build_command(self, prompt: str) -> list[str]:
        """Build the CLI command list for this backend."""

    async def submit(self, prompt: str, cancel: asyncio.Event) -> str:
        backend_id = self.backend_id
        if cancel.is_set():
            raise RequestCancelledError(backend_id)

        cmd = self.build_command(prompt)
        log.info("Running %s: %s", backend_id, " ".join(cmd[:4]) + "...")
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise BackendUnavailableError(backend_id, f"Failed to start: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            await terminate_process(proc)
            raise BackendUnavailableError(backend_id, f"Timed out after {self.timeout}s") from e
        except asyncio.CancelledError:
            await terminate_process(proc)
            raise

        return self.parse_output(stdout, stderr, proc.returncode)

    def parse_output(self, stdout: bytes, stderr: bytes, returncode: int) -> str:
        """Turn subprocess output into response text, raising on failure."""
        output = clean_ansi(stdout.decode("utf-8", errors="replace")).strip()
        err = self._filter_stderr(clean_ansi(stderr.decode("utf-8", errors="replace")).strip())
        if returncode == 0 and output:
            return output

        combined = f"{output}\n{err}"
        if self.is_rate_limited(combined):
            raise BackendThrottledError(
                self.backend_id, err[:200], retry_after=self.extract_retry_after(combined)
            )
        if any(p.search(combined) for p in BLOCKED_PATTERNS):
            raise BackendBlockedError(self.backend_id, err[:200] or "Request blocked")
        if returncode != 0:
            raise BackendUnavailableError(
                self.backend_id, f"Exited with code {returncode}: {err[:200]}"
            )
        return output

    def is_rate_limited(self, text: str) -> bool:
        """Check if the output indicates a rate limit error."""
        return any(p.search(text) for p in RATE_LIMIT_PATTERNS)

    def extract_retry_after(self, text: str) -> float | None:
        """Try to extract a retry-after delay in seconds from the output."""
        match = RETRY_AFTER_PATTERN.search(text)
        if match:
            return float(match.group(1))
        return None

    def _filter_stderr(self, stderr: str) -> str:
        """Override in subclasses to filter known benign warnings."""
        return stderr


async def terminate_process(proc: asyncio.subprocess.Process) -> None:
    """Kill the child process and wait for it to exit."""
    try:
        proc.kill()
    except ProcessLookupError:
        return
    try:
        await asyncio.wait_for(proc.wait(), timeout=KILL_REAP_TIMEOUT)
    except asyncio.TimeoutError:
        log.warning("Process %s did not exit after kill", proc.pid)


def clean_ansi(text: str) -> str:
    """Strip terminal colour and cursor escapes that vendor CLIs emit."""
    return _ANSI_PATTERN.sub("", text)
