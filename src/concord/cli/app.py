"""Main Click group entry point for Concord CLI."""

from __future__ import annotations

import click

from concord import __version__
from concord.cli.compare_cmd import compare
from concord.cli.run_cmd import run
from concord.cli.status_cmd import status


@click.group()
@click.version_option(__version__, prog_name="concord")
def cli() -> None:
    """Concord — compare one prompt across several AI backends."""


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _make_config_group() -> click.Group:
    """Create the config subcommand group."""

    @click.group()
    def config() -> None:
        """View and modify Concord configuration."""

    @config.command("show")
    def config_show() -> None:
        """Display current configuration."""
        from concord.config import CONFIG_FILE, load_config
        from concord.output.console import console

        cfg = load_config()
        console.print(f"\n[header]Concord Configuration[/header] ({CONFIG_FILE})\n")
        console.print(f"  preferred_backends: {', '.join(cfg.preferred_backends) or '(auto)'}")
        console.print(f"  include_optional_backends: {cfg.include_optional_backends}")
        console.print(f"  display_mode: {cfg.display_mode.value}")
        console.print(f"  reviewer: {cfg.reviewer or '(none)'}")
        console.print()
        for name, backend_cfg in cfg.backends.items():
            marker = " (optional)" if backend_cfg.optional else ""
            console.print(f"  [backend]{name}[/backend]{marker}:")
            console.print(f"    timeout: {backend_cfg.timeout}s")
            if backend_cfg.default_model:
                console.print(f"    model: {backend_cfg.default_model}")
            if backend_cfg.models:
                console.print(f"    models: {', '.join(backend_cfg.models)}")
            if backend_cfg.tier:
                console.print(f"    tier: {backend_cfg.tier.value}")
            if backend_cfg.extra_args:
                console.print(f"    extra_args: {backend_cfg.extra_args}")
        console.print()

    @config.command("set")
    @click.argument("key")
    @click.argument("value")
    def config_set(key: str, value: str) -> None:
        """Set a configuration value (e.g., 'preferred_backends claude,codex')."""
        from pydantic import ValidationError

        from concord.config import load_config, save_config
        from concord.models.config import DisplayMode
        from concord.models.response import TierClass
        from concord.output.console import console

        cfg = load_config()

        try:
            if key == "preferred_backends":
                cfg.preferred_backends = [v.strip() for v in value.split(",") if v.strip()]
            elif key == "include_optional_backends":
                cfg.include_optional_backends = _parse_bool(value)
            elif key == "display_mode":
                cfg.display_mode = DisplayMode(value)
            elif key == "reviewer":
                cfg.reviewer = value or None
            elif "." in key:
                parts = key.split(".")
                if len(parts) != 3 or parts[0] != "backends":
                    console.print(f"[status.failed]Unknown key: {key}[/status.failed]")
                    return
                backend_name, field = parts[1], parts[2]
                backend_cfg = cfg.get_backend_config(backend_name)
                if field in ("auto_approve", "optional"):
                    setattr(backend_cfg, field, _parse_bool(value))
                elif field == "timeout":
                    backend_cfg.timeout = int(value)
                elif field == "default_model":
                    backend_cfg.default_model = value
                elif field == "models":
                    backend_cfg.models = [v.strip() for v in value.split(",") if v.strip()]
                elif field == "tier":
                    backend_cfg.tier = TierClass(value) if value else None
                else:
                    console.print(f"[status.failed]Unknown field: {field}[/status.failed]")
                    return
                cfg.backends[backend_name] = backend_cfg
            else:
                console.print(f"[status.failed]Unknown key: {key}[/status.failed]")
                return
        except (ValueError, ValidationError) as e:
            console.print(f"[status.failed]Invalid value for {key}: {e}[/status.failed]")
            return

        save_config(cfg)
        console.print(f"[status.success]Set {key} = {value}[/status.success]")

    return config


# Register subcommands
cli.add_command(compare)
cli.add_command(run)
cli.add_command(status)
cli.add_command(_make_config_group(), "config")
