"""Fan a prompt out across backends and keep one comparison session current."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

from concord.analysis.engine import compute_analysis
from concord.backends.base import BackendClient
from concord.backends.catalog import resolve_default_backends
from concord.core.executor import BackendExecutor
from concord.core.reviewer import ComparisonReviewer
from concord.exceptions import (
    InsufficientBackendsError,
    InsufficientDataForAnalysisError,
    UnknownPromptError,
)
from concord.logger import log
from concord.models.config import AppConfig
from concord.models.response import AIResponse, BackendIdentity, ErrorKind
from concord.models.session import ComparisonSession, SessionSnapshot

MIN_BACKENDS = 2


class Orchestrator:
    """Compare one prompt across backends and maintain the resulting session."""

    def __init__(
        self,
        catalog: dict[str, BackendClient],
        executor: BackendExecutor,
        config: AppConfig | None = None,
        reviewer: ComparisonReviewer | None = None,
        on_snapshot: Callable[[SessionSnapshot], None] | None = None,
    ):
        self.catalog = catalog
        self.executor = executor
        self.config = config or AppConfig()
        self.reviewer = reviewer
        self.on_snapshot = on_snapshot

    def resolve_backends(self, backend_ids: list[str] | None = None) -> list[BackendClient]:
        """Explicit ids, else configured preferences, else the cheapest two by tier."""
        wanted = backend_ids or self.config.preferred_backends
        if not wanted:
            chosen = resolve_default_backends(self.catalog.values())
            log.info("No backends requested, auto-selected: %s", [b.backend_id for b in chosen])
            return chosen

        resolved = []
        for backend_id in wanted:
            backend = self.catalog.get(backend_id)
            if backend is None:
                log.warning("Skipping unavailable backend: %s", backend_id)
                continue
            resolved.append(backend)
        return resolved

    async def compare_across_backends(
        self,
        prompt: str,
        backends: list[BackendClient],
        cancel: asyncio.Event | None = None,
    ) -> list[AIResponse]:
        """Query every backend concurrently and return responses ordered by start time.

        Raises:
            InsufficientBackendsError: Fewer than two distinct backends, before any request.
        """
        unique: dict[str, BackendClient] = {}
        for backend in backends:
            unique.setdefault(backend.backend_id, backend)
        if len(unique) < len(backends):
            log.warning("Ignoring %d duplicate backend(s)", len(backends) - len(unique))
        if len(unique) < MIN_BACKENDS:
            raise InsufficientBackendsError(len(unique))

        log.info("Comparing across %d backends: %s", len(unique), list(unique))
        responses = await self.executor.run_parallel(list(unique.values()), prompt, cancel)

        failed = [r.backend_id for r in responses if not r.ok]
        log.info("Fan-out settled: %d ok, %d failed %s", len(responses) - len(failed), len(failed), failed)
        return sorted(responses, key=lambda r: r.started_at)

    async def start_session(
        self,
        prompt: str,
        backend_ids: list[str] | None = None,
        cancel: asyncio.Event | None = None,
    ) -> ComparisonSession:
        """Run a fresh comparison for ``prompt`` and analyze it."""
        backends = self.resolve_backends(backend_ids)
        responses = await self.compare_across_backends(prompt, backends, cancel)

        session = ComparisonSession(prompt=prompt)
        for response in responses:
            session.store.put(response)

        await self._refresh(session, cancel)
        return session

    async def add_backend(
        self,
        session: ComparisonSession,
        backend_id: str,
        cancel: asyncio.Event | None = None,
    ) -> ComparisonSession:
        """Query one more backend with the session's prompt and re-analyze.

        Raises:
            UnknownPromptError: The session has no prompt to reuse.
        """
        if not session.prompt:
            raise UnknownPromptError()

        backend = self.catalog.get(backend_id)
        if backend is None:
            log.warning("Backend %s not in catalog", backend_id)
            response = _missing_backend(backend_id)
        else:
            log.info("Adding %s to session", backend_id)
            [response] = await self.executor.run_parallel([backend], session.prompt, cancel)

        session.store.put(response)
        await self._refresh(session, cancel)
        return session

    async def run_single(
        self, backend_id: str, prompt: str, cancel: asyncio.Event | None = None
    ) -> AIResponse:
        """Query a single backend outside any session."""
        backend = self.catalog.get(backend_id)
        if backend is None:
            return _missing_backend(backend_id)
        return await self.executor.run_single(backend, prompt, cancel)

    async def _refresh(self, session: ComparisonSession, cancel: asyncio.Event | None) -> None:
        """Recompute analysis (and review) after the response set changed, then publish."""
        responses = session.store.responses()
        try:
            session.analysis = compute_analysis(responses)
            session.analysis_note = None
        except InsufficientDataForAnalysisError as e:
            log.info("Analysis unavailable: %s", e)
            session.analysis = None
            session.analysis_note = str(e)

        # A review always describes the current response set or is absent
        session.review = None
        if self.reviewer is not None and not (cancel and cancel.is_set()):
            session.review = await self.reviewer.review(session.prompt, responses, cancel)

        if self.on_snapshot is not None:
            self.on_snapshot(session.snapshot())


def _missing_backend(backend_id: str) -> AIResponse:
    return AIResponse.failed(
        BackendIdentity(id=backend_id, display_name=backend_id),
        ErrorKind.BACKEND_UNAVAILABLE,
        f"Backend '{backend_id}' not found",
        started_at=time.time(),
    )
