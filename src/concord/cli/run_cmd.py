"""Direct backend run command — concord run <backend> "prompt"."""

from __future__ import annotations

import asyncio

import click
from rich.markup import escape

from concord.output.console import console, error_console


@click.command()
@click.argument("backend")
@click.argument("prompt")
def run(backend: str, prompt: str) -> None:
    """Run a prompt directly on a single backend.

    Example: concord run claude "Explain this architecture"
    """
    asyncio.run(_run_direct(backend, prompt))


async def _run_direct(backend_id: str, prompt: str) -> None:
    """Execute a prompt on one backend and print its text."""
    from concord.cli.common import build_orchestrator, install_cancel_handler
    from concord.config import load_config

    config = load_config()
    orchestrator = await build_orchestrator(config)

    if backend_id not in orchestrator.catalog:
        error_console.print(
            f"[status.failed]Backend '{backend_id}' not found. "
            f"Available: {', '.join(orchestrator.catalog) or 'none'}[/status.failed]"
        )
        raise SystemExit(1)

    cancel = asyncio.Event()
    install_cancel_handler(cancel)

    with console.status(f"[status.running]Running on {backend_id}...[/status.running]"):
        response = await orchestrator.run_single(backend_id, prompt, cancel)

    if not response.ok:
        error_console.print(f"[status.failed]{response.status_label}: {escape(response.error_message)}[/status.failed]")
        raise SystemExit(1)

    console.print(response.text, markup=False)
    console.print(f"\n[dim]Completed in {response.latency_ms / 1000:.1f}s[/dim]\n")
