"""Status command — concord status."""

from __future__ import annotations

import asyncio

import click

from concord import __version__
from concord.output.console import console


@click.command()
def status() -> None:
    """Show detected backends, their tiers and the default selection."""
    asyncio.run(_status())


async def _status() -> None:
    """Display the backend catalog in a Rich table."""
    from rich.table import Table

    from concord.backends.catalog import build_catalog, resolve_default_backends
    from concord.backends.detector import BackendDetector
    from concord.config import load_config

    config = load_config()

    with console.status("[status.running]Detecting backends...[/status.running]"):
        detected = await BackendDetector(config).detect_all()

    console.print(f"\n[header]Concord v{__version__}[/header]\n")

    if not detected:
        console.print("[status.failed]No AI CLI backends detected.[/status.failed]")
        console.print("Install at least two of: claude, codex, gemini\n")
        return

    catalog = build_catalog(detected, config)
    defaults = {b.backend_id for b in resolve_default_backends(catalog.values())}

    table = Table(show_header=True, header_style="bold")
    table.add_column("Backend", style="bold")
    table.add_column("Name")
    table.add_column("Tier", style="tier")
    table.add_column("Version")
    table.add_column("Path")
    table.add_column("Default", justify="center")

    for backend_id, backend in catalog.items():
        identity = backend.identify()
        found = detected[backend.name]
        table.add_row(
            backend_id,
            identity.display_name,
            identity.tier_class.value,
            found.version,
            backend.binary_path,
            "✓" if backend_id in defaults else "",
        )

    console.print(table)
    if config.preferred_backends:
        console.print(f"\n  Preferred backends: {', '.join(config.preferred_backends)}\n")
    else:
        console.print("\n  No preferred backends configured; the ✓ rows are used.\n")
