"""TOML configuration loading from ~/.concord/config.toml."""

from __future__ import annotations

from pathlib import Path

import toml
from pydantic import ValidationError

from concord.exceptions import ConfigError
from concord.logger import CONCORD_HOME, log
from concord.models.config import AppConfig, BackendConfig

CONFIG_DIR = CONCORD_HOME
CONFIG_FILE = CONFIG_DIR / "config.toml"

_DEFAULT_CONFIG_TOML = """\
# Concord configuration
# Backends to compare by default. Leave empty to pick the two cheapest
# available backends automatically.
preferred_backends = []

# Include backends marked optional (below) in the catalog
include_optional_backends = false

# side-by-side | unified | analysis-only
display_mode = "side-by-side"

# Backend asked to write a structured review of the answers (optional)
# reviewer = "claude"

# Rate limit retry settings
max_retries = 3
retry_base_delay = 5.0
retry_max_delay = 60.0

[backends.claude]
auto_approve = true
timeout = 300
# models = ["haiku", "sonnet"]

[backends.codex]
auto_approve = true
timeout = 300
extra_args = ["--skip-git-repo-check"]

[backends.gemini]
auto_approve = true
timeout = 300
optional = true
"""


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from ~/.concord/config.toml, creating defaults if missing."""
    config_file = path or CONFIG_FILE
    if not config_file.exists():
        log.info("No config file found, creating default at %s", config_file)
        config_file.parent.mkdir(parents=True, exist_ok=True)
        config_file.write_text(_DEFAULT_CONFIG_TOML, encoding="utf-8")
        return AppConfig()

    try:
        raw = toml.loads(config_file.read_text(encoding="utf-8"))
        log.debug("Loaded config: %s", raw)
        return _parse_raw_config(raw)
    except (toml.TomlDecodeError, ConfigError) as e:
        log.warning("Failed to parse config, using defaults: %s", e)
        return AppConfig()


def _parse_raw_config(raw: dict) -> AppConfig:
    """Parse raw TOML dict into AppConfig."""
    try:
        backends = {
            name: BackendConfig(**backend_raw)
            for name, backend_raw in raw.get("backends", {}).items()
        }
        defaults = AppConfig()
        return AppConfig(
            preferred_backends=raw.get("preferred_backends", []),
            include_optional_backends=raw.get("include_optional_backends", False),
            display_mode=raw.get("display_mode", defaults.display_mode),
            reviewer=raw.get("reviewer") or None,
            max_retries=raw.get("max_retries", 3),
            retry_base_delay=raw.get("retry_base_delay", 5.0),
            retry_max_delay=raw.get("retry_max_delay", 60.0),
            backends=backends if backends else defaults.backends,
        )
    except (ValidationError, TypeError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def save_config(config: AppConfig, path: Path | None = None) -> None:
    """Save configuration back to ~/.concord/config.toml."""
    config_file = path or CONFIG_FILE
    config_file.parent.mkdir(parents=True, exist_ok=True)

    data: dict = {
        "preferred_backends": config.preferred_backends,
        "include_optional_backends": config.include_optional_backends,
        "display_mode": config.display_mode.value,
        "max_retries": config.max_retries,
        "retry_base_delay": config.retry_base_delay,
        "retry_max_delay": config.retry_max_delay,
        "backends": {},
    }
    if config.reviewer:
        data["reviewer"] = config.reviewer
    for name, backend_cfg in config.backends.items():
        backend_dict = backend_cfg.model_dump(mode="json", exclude_none=True)
        # Remove empty lists to keep config clean
        for key in ("extra_args", "models"):
            if not backend_dict.get(key):
                backend_dict.pop(key, None)
        data["backends"][name] = backend_dict

    config_file.write_text(toml.dumps(data), encoding="utf-8")
    log.info("Saved config to %s", config_file)
