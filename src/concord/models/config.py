"""Pydantic configuration models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from concord.models.response import TierClass


class DisplayMode(str, Enum):
    SIDE_BY_SIDE = "side-by-side"
    UNIFIED = "unified"
    ANALYSIS_ONLY = "analysis-only"


class BackendConfig(BaseModel):
    """Configuration for a single backend CLI."""

    binary_path: str | None = None  # Auto-detected if omitted
    default_model: str | None = None
    models: list[str] = Field(default_factory=list)
    tier: TierClass | None = None  # Inferred from the model name if omitted
    optional: bool = False
    auto_approve: bool = True
    timeout: int = 300
    extra_args: list[str] = Field(default_factory=list)


class AppConfig(BaseModel):
    """Top-level application configuration."""

    preferred_backends: list[str] = Field(default_factory=list)
    include_optional_backends: bool = False
    display_mode: DisplayMode = DisplayMode.SIDE_BY_SIDE
    reviewer: str | None = None
    max_retries: int = 3
    retry_base_delay: float = 5.0
    retry_max_delay: float = 60.0
    backends: dict[str, BackendConfig] = Field(default_factory=lambda: {
        "claude": BackendConfig(),
        "codex": BackendConfig(extra_args=["--skip-git-repo-check"]),
        "gemini": BackendConfig(optional=True),
    })

    def get_backend_config(self, name: str) -> BackendConfig:
        """Get config for a specific backend, with defaults."""
        return self.backends.get(name, BackendConfig())
