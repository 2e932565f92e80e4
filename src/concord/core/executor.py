"""Async per-backend task runner with throttling retry and cooperative cancellation."""

from __future__ import annotations

import asyncio
import time

from concord.backends.base import BackendClient
from concord.exceptions import BackendError, BackendThrottledError, RequestCancelledError
from concord.logger import log
from concord.models.config import AppConfig
from concord.models.response import AIResponse, BackendIdentity, ErrorKind


class BackendExecutor:
    """Run backend submissions, turning every failure into an error-tagged response."""

    def __init__(self, config: AppConfig | None = None):
        self._max_retries = config.max_retries if config else 3
        self._retry_base_delay = config.retry_base_delay if config else 5.0
        self._retry_max_delay = config.retry_max_delay if config else 60.0

    async def run_single(
        self, backend: BackendClient, prompt: str, cancel: asyncio.Event | None = None
    ) -> AIResponse:
        """Run one backend, retrying on throttling with exponential backoff.

        Never raises; the outcome is always an AIResponse.
        """
        cancel = cancel or asyncio.Event()
        identity = backend.identify()
        started_at = time.time()
        start = time.monotonic()

        def elapsed_ms() -> float:
            return (time.monotonic() - start) * 1000

        last_error: BackendThrottledError | None = None

        for attempt in range(self._max_retries + 1):
            if attempt > 0:
                delay = self._compute_delay(attempt, last_error)
                log.warning(
                    "%s throttled (attempt %d/%d), retrying in %.1fs",
                    identity.id, attempt, self._max_retries, delay,
                )
                if await _sleep_unless_cancelled(delay, cancel):
                    return self._cancelled(identity, started_at, elapsed_ms(), attempt - 1)

            try:
                text = await self._submit_once(backend, identity, prompt, cancel)
            except BackendThrottledError as e:
                last_error = e
                continue
            except BackendError as e:
                if e.kind is ErrorKind.CANCELLED:
                    log.info("%s cancelled after %.0fms", identity.id, elapsed_ms())
                else:
                    log.warning("%s failed: %s", identity.id, e)
                return AIResponse.failed(identity, e.kind, e.message, started_at, elapsed_ms(), attempt)
            except Exception as e:
                log.error("%s failed unexpectedly: %s", identity.id, e)
                return AIResponse.failed(
                    identity, ErrorKind.BACKEND_UNAVAILABLE, f"Unexpected error: {e}",
                    started_at, elapsed_ms(), attempt,
                )

            latency = elapsed_ms()
            log.info(
                "%s completed in %.0fms (output=%d chars, retries=%d)",
                identity.id, latency, len(text), attempt,
            )
            return AIResponse.succeeded(identity, text, started_at, latency, attempt)

        # All retries exhausted, report the last throttling error
        assert last_error is not None
        log.error(
            "%s still throttled after %d retries (%.1fs total)",
            identity.id, self._max_retries, elapsed_ms() / 1000,
        )
        return AIResponse.failed(
            identity, ErrorKind.BACKEND_THROTTLED, last_error.message,
            started_at, elapsed_ms(), self._max_retries,
        )

    async def run_parallel(
        self, backends: list[BackendClient], prompt: str, cancel: asyncio.Event | None = None
    ) -> list[AIResponse]:
        """Run every backend concurrently; one response per backend, in input order."""
        cancel = cancel or asyncio.Event()
        coros = [self.run_single(backend, prompt, cancel) for backend in backends]
        results = await asyncio.gather(*coros, return_exceptions=True)

        processed = []
        for backend, r in zip(backends, results):
            if isinstance(r, AIResponse):
                processed.append(r)
            else:
                log.error("Task for %s raised: %r", backend.backend_id, r)
                processed.append(AIResponse.failed(
                    backend.identify(), ErrorKind.BACKEND_UNAVAILABLE, str(r), time.time(),
                ))

        return processed

    def _compute_delay(self, attempt: int, last_error: BackendThrottledError | None) -> float:
        """Compute retry delay: use server's retry-after if available, else exponential backoff."""
        if last_error and last_error.retry_after is not None:
            return min(last_error.retry_after, self._retry_max_delay)

        # Exponential backoff: base * 2^(attempt-1), capped at max
        delay = self._retry_base_delay * (2 ** (attempt - 1))
        return min(delay, self._retry_max_delay)

    async def _submit_once(
        self, backend: BackendClient, identity: BackendIdentity, prompt: str, cancel: asyncio.Event
    ) -> str:
        """Race one submission against the cancellation signal."""
        if cancel.is_set():
            raise RequestCancelledError(identity.id)

        submit_task = asyncio.ensure_future(backend.submit(prompt, cancel))
        cancel_task = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait(
                {submit_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            submit_task.cancel()
            raise
        finally:
            cancel_task.cancel()

        # A submission that finished keeps its result even if cancel fired too
        if submit_task in done:
            return submit_task.result()

        submit_task.cancel()
        await asyncio.gather(submit_task, return_exceptions=True)
        raise RequestCancelledError(identity.id)

    @staticmethod
    def _cancelled(identity: BackendIdentity, started_at: float, latency_ms: float, retries: int) -> AIResponse:
        return AIResponse.failed(
            identity, ErrorKind.CANCELLED, "Request cancelled", started_at, latency_ms, retries,
        )


async def _sleep_unless_cancelled(delay: float, cancel: asyncio.Event) -> bool:
    """Sleep for ``delay`` seconds; return True if cancelled first."""
    try:
        await asyncio.wait_for(cancel.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return False
    return True
