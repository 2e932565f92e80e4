"""Shared setup for CLI commands: detection, catalog and orchestrator wiring."""

from __future__ import annotations

import asyncio
import signal
from collections.abc import Callable

from concord.backends.catalog import build_catalog
from concord.backends.detector import BackendDetector
from concord.core.executor import BackendExecutor
from concord.core.orchestrator import Orchestrator
from concord.core.reviewer import ComparisonReviewer
from concord.exceptions import NoBackendsDetectedError
from concord.logger import log
from concord.models.config import AppConfig
from concord.models.session import SessionSnapshot
from concord.output.console import console, error_console


async def build_orchestrator(
    config: AppConfig,
    on_snapshot: Callable[[SessionSnapshot], None] | None = None,
) -> Orchestrator:
    """Detect installed CLIs and wire an orchestrator around them."""
    with console.status("[status.running]Detecting backends...[/status.running]"):
        detected = await BackendDetector(config).detect_all()

    if not detected:
        raise NoBackendsDetectedError()

    catalog = build_catalog(detected, config)
    executor = BackendExecutor(config)

    reviewer = None
    if config.reviewer:
        reviewer_backend = catalog.get(config.reviewer)
        if reviewer_backend is None:
            error_console.print(
                f"[status.failed]Reviewer '{config.reviewer}' not available, "
                f"skipping review.[/status.failed]"
            )
        else:
            reviewer = ComparisonReviewer(reviewer_backend, executor)

    return Orchestrator(
        catalog=catalog,
        executor=executor,
        config=config,
        reviewer=reviewer,
        on_snapshot=on_snapshot,
    )


def install_cancel_handler(cancel: asyncio.Event) -> None:
    """Make Ctrl-C set the shared cancellation signal instead of aborting."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel.set)
    except (NotImplementedError, RuntimeError):
        log.debug("Signal handlers unsupported on this platform")
