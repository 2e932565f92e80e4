"""Comparison command — concord compare "prompt"."""

from __future__ import annotations

import asyncio

import click

from concord.models.config import DisplayMode
from concord.output.console import console, error_console


@click.command()
@click.argument("prompt")
@click.option("--backends", "-b", default=None, help="Comma-separated backend ids (default: configured or auto)")
@click.option(
    "--mode", "-m",
    type=click.Choice([m.value for m in DisplayMode]),
    default=None,
    help="Display mode (default: from config)",
)
@click.option("--add", "-a", "additions", multiple=True, help="Backend to add after the first round (repeatable)")
@click.option("--explain", is_flag=True, help="Also compare explanation quality")
def compare(prompt: str, backends: str | None, mode: str | None,
            additions: tuple[str, ...], explain: bool) -> None:
    """Run a prompt on several backends in parallel and compare the answers.

    Example: concord compare "Write a merge sort in Python" --add gemini
    """
    backend_list = [b.strip() for b in backends.split(",") if b.strip()] if backends else None
    asyncio.run(_compare(prompt, backend_list, mode, list(additions), explain))


async def _compare(prompt: str, backends: list[str] | None, mode: str | None,
                   additions: list[str], explain: bool) -> None:
    """Execute the comparison and render each snapshot."""
    from concord.analysis.engine import compare_explanation_quality, explain_responses
    from concord.cli.common import build_orchestrator, install_cancel_handler
    from concord.config import load_config
    from concord.exceptions import ConcordError
    from concord.output.formatters import format_explanations, format_snapshot

    config = load_config()
    display_mode = DisplayMode(mode) if mode else config.display_mode

    def render(snapshot) -> None:
        format_snapshot(snapshot, console, display_mode)
        console.print()

    cancel = asyncio.Event()
    try:
        orchestrator = await build_orchestrator(config, on_snapshot=render)
        install_cancel_handler(cancel)

        console.print("\n[header]Concord[/header] — comparing backends\n")
        with console.status("[status.running]Querying backends in parallel...[/status.running]"):
            session = await orchestrator.start_session(prompt, backends, cancel)

        for backend_id in additions:
            if cancel.is_set():
                break
            with console.status(f"[status.running]Adding {backend_id}...[/status.running]"):
                await orchestrator.add_backend(session, backend_id, cancel)
    except ConcordError as e:
        error_console.print(f"[status.failed]{e}[/status.failed]")
        raise SystemExit(1)

    if explain:
        format_explanations(
            explain_responses(session.responses),
            compare_explanation_quality(session.responses),
            console,
        )
