"""Backend identity and per-backend response models."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum


class TierClass(str, Enum):
    """Cost tier of a backend, used by the default resolution policy."""

    ECONOMICAL = "economical"
    FLAGSHIP = "flagship"
    STANDARD = "standard"

    @property
    def priority(self) -> int:
        return _TIER_PRIORITY[self]


_TIER_PRIORITY = {
    TierClass.ECONOMICAL: 1,
    TierClass.FLAGSHIP: 2,
    TierClass.STANDARD: 3,
}


class ErrorKind(str, Enum):
    """Why a backend produced no text."""

    BACKEND_UNAVAILABLE = "backend_unavailable"
    BACKEND_THROTTLED = "backend_throttled"
    BACKEND_BLOCKED = "backend_blocked"
    CANCELLED = "cancelled"


_STATUS_LABELS = {
    ErrorKind.BACKEND_UNAVAILABLE: "UNAVAILABLE",
    ErrorKind.BACKEND_THROTTLED: "THROTTLED",
    ErrorKind.BACKEND_BLOCKED: "BLOCKED",
    ErrorKind.CANCELLED: "CANCELLED",
}


@dataclass(frozen=True)
class BackendIdentity:
    """What a backend reports about itself."""

    id: str
    display_name: str
    tier_class: TierClass = TierClass.STANDARD


def estimate_tokens(text: str) -> int:
    """Rough estimate: ~4 characters per token for English text."""
    return math.ceil(len(text) / 4)


@dataclass(frozen=True)
class AIResponse:
    """One backend's outcome for one prompt."""

    backend_id: str
    display_name: str
    text: str
    started_at: float
    latency_ms: float = 0.0
    error_kind: ErrorKind | None = None
    error_message: str = ""
    retries: int = 0

    def __post_init__(self) -> None:
        if self.error_kind is not None and self.text:
            raise ValueError("An error-tagged response cannot carry text")

    @classmethod
    def succeeded(
        cls,
        identity: BackendIdentity,
        text: str,
        started_at: float,
        latency_ms: float,
        retries: int = 0,
    ) -> AIResponse:
        return cls(
            backend_id=identity.id,
            display_name=identity.display_name,
            text=text,
            started_at=started_at,
            latency_ms=latency_ms,
            retries=retries,
        )

    @classmethod
    def failed(
        cls,
        identity: BackendIdentity,
        kind: ErrorKind,
        message: str,
        started_at: float,
        latency_ms: float = 0.0,
        retries: int = 0,
    ) -> AIResponse:
        """Create an error-tagged response; the text is always empty."""
        return cls(
            backend_id=identity.id,
            display_name=identity.display_name,
            text="",
            started_at=started_at,
            latency_ms=latency_ms,
            error_kind=kind,
            error_message=message,
            retries=retries,
        )

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @property
    def token_estimate(self) -> int:
        return estimate_tokens(self.text)

    @property
    def status_label(self) -> str:
        """Human-readable status."""
        if self.ok:
            if self.retries > 0:
                return f"SUCCESS (retried {self.retries}x)"
            return "SUCCESS"
        return _STATUS_LABELS[self.error_kind]
