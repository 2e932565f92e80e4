"""Build the backend catalog and pick default backends by cost tier."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from concord.backends.base import BackendClient, CLIBackend
from concord.backends.claude import ClaudeBackend
from concord.backends.codex import CodexBackend
from concord.backends.gemini import GeminiBackend
from concord.logger import log
from concord.models.config import AppConfig
from concord.models.response import TierClass

if TYPE_CHECKING:
    from concord.backends.detector import DetectedBackend

BACKEND_CLASSES: dict[str, type[CLIBackend]] = {
    "claude": ClaudeBackend,
    "codex": CodexBackend,
    "gemini": GeminiBackend,
}

DEFAULT_BACKEND_COUNT = 2

_ECONOMICAL_PATTERN = re.compile(r"(?:-|\b)(?:mini|nano|lite|flash|haiku)\b", re.IGNORECASE)
_FLAGSHIP_PATTERN = re.compile(r"\b(?:gpt-4(?:\.\d+)?o?|gpt-5|opus|sonnet|pro)\b", re.IGNORECASE)


def classify_tier(model: str | None) -> TierClass:
    """Infer a tier from a model name; unknown or missing names are STANDARD."""
    if not model:
        return TierClass.STANDARD
    if _ECONOMICAL_PATTERN.search(model):
        return TierClass.ECONOMICAL
    if _FLAGSHIP_PATTERN.search(model):
        return TierClass.FLAGSHIP
    return TierClass.STANDARD


def build_catalog(detected: dict[str, DetectedBackend], config: AppConfig) -> dict[str, BackendClient]:
    """Build backend instances from detected CLIs and config, keyed by backend id.

    A backend configured with ``models`` contributes one entry per model.
    """
    catalog: dict[str, BackendClient] = {}
    for name, found in detected.items():
        cls = BACKEND_CLASSES.get(name)
        if cls is None:
            continue
        backend_cfg = config.get_backend_config(name)
        if backend_cfg.optional and not config.include_optional_backends:
            log.debug("Skipping optional backend %s", name)
            continue

        for model in backend_cfg.models or [backend_cfg.default_model]:
            client = cls(
                binary_path=found.binary_path,
                timeout=backend_cfg.timeout,
                auto_approve=backend_cfg.auto_approve,
                default_model=model,
                extra_args=backend_cfg.extra_args,
                tier=backend_cfg.tier or classify_tier(model),
            )
            catalog[client.backend_id] = client
    return catalog


def resolve_default_backends(
    catalog: Iterable[BackendClient], count: int = DEFAULT_BACKEND_COUNT
) -> list[BackendClient]:
    """Pick backends cheapest tier first, keeping catalog order within a tier."""
    ordered = sorted(catalog, key=lambda b: b.identify().tier_class.priority)
    return ordered[:count]
