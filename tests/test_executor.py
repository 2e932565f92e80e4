"""Tests for the async executor."""

from __future__ import annotations

import asyncio

import pytest

from concord.core.executor import BackendExecutor
from concord.exceptions import (
    BackendBlockedError,
    BackendThrottledError,
    BackendUnavailableError,
)
from concord.models.response import ErrorKind

from conftest import FakeBackend


class TestBackendExecutor:
    """Tests for BackendExecutor."""

    @pytest.mark.asyncio
    async def test_run_single_success(self):
        backend = FakeBackend("claude", text="Hello!")
        result = await BackendExecutor().run_single(backend, "Say hello")

        assert result.ok
        assert result.text == "Hello!"
        assert result.backend_id == "claude"
        assert result.latency_ms >= 0
        assert result.retries == 0
        assert backend.prompts == ["Say hello"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error,kind", [
        (BackendUnavailableError("claude", "Timed out after 30s"), ErrorKind.BACKEND_UNAVAILABLE),
        (BackendBlockedError("claude", "content policy"), ErrorKind.BACKEND_BLOCKED),
    ])
    async def test_run_single_failure(self, error, kind):
        backend = FakeBackend("claude", errors=[error])
        result = await BackendExecutor().run_single(backend, "bad prompt")

        assert not result.ok
        assert result.error_kind is kind
        assert result.text == ""
        assert backend.calls == 1

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_contained(self):
        backend = FakeBackend("claude", errors=[RuntimeError("kaboom")])
        result = await BackendExecutor().run_single(backend, "p")

        assert result.error_kind is ErrorKind.BACKEND_UNAVAILABLE
        assert "kaboom" in result.error_message

    @pytest.mark.asyncio
    async def test_rate_limit_retries(self, fast_retry_config):
        backend = FakeBackend(
            "claude",
            text="Success after retry",
            errors=[BackendThrottledError("claude", "429"), BackendThrottledError("claude", "429")],
        )
        result = await BackendExecutor(config=fast_retry_config).run_single(backend, "p")

        assert result.ok
        assert result.text == "Success after retry"
        assert result.retries == 2
        assert result.status_label == "SUCCESS (retried 2x)"
        assert backend.calls == 3

    @pytest.mark.asyncio
    async def test_rate_limit_exhausted(self, fast_retry_config):
        backend = FakeBackend(
            "claude", errors=[BackendThrottledError("claude", "429") for _ in range(3)],
        )
        result = await BackendExecutor(config=fast_retry_config).run_single(backend, "p")

        assert result.error_kind is ErrorKind.BACKEND_THROTTLED
        assert result.retries == 2
        assert backend.calls == 3

    def test_compute_delay(self, fast_retry_config):
        executor = BackendExecutor(config=fast_retry_config)
        assert executor._compute_delay(1, None) == pytest.approx(0.01)
        assert executor._compute_delay(2, None) == pytest.approx(0.02)
        assert executor._compute_delay(5, None) == pytest.approx(0.05)

    def test_compute_delay_uses_retry_after(self, fast_retry_config):
        executor = BackendExecutor(config=fast_retry_config)
        assert executor._compute_delay(1, BackendThrottledError("x", retry_after=0.03)) == 0.03
        assert executor._compute_delay(1, BackendThrottledError("x", retry_after=30)) == 0.05

    @pytest.mark.asyncio
    async def test_cancelled_before_start(self):
        backend = FakeBackend("claude", text="never")
        cancel = asyncio.Event()
        cancel.set()

        result = await BackendExecutor().run_single(backend, "p", cancel)

        assert result.error_kind is ErrorKind.CANCELLED
        assert backend.calls == 0

    @pytest.mark.asyncio
    async def test_cancelled_in_flight(self):
        backend = FakeBackend("claude", text="too late", delay=5.0)
        cancel = asyncio.Event()
        executor = BackendExecutor()

        task = asyncio.create_task(executor.run_single(backend, "p", cancel))
        await asyncio.sleep(0.01)
        cancel.set()
        result = await asyncio.wait_for(task, timeout=1.0)

        assert result.error_kind is ErrorKind.CANCELLED
        assert result.text == ""

    @pytest.mark.asyncio
    async def test_cancelled_during_backoff(self):
        backend = FakeBackend(
            "claude", errors=[BackendThrottledError("claude", "slow down", retry_after=5)],
        )
        cancel = asyncio.Event()
        executor = BackendExecutor()

        task = asyncio.create_task(executor.run_single(backend, "p", cancel))
        await asyncio.sleep(0.01)
        cancel.set()
        result = await asyncio.wait_for(task, timeout=1.0)

        assert result.error_kind is ErrorKind.CANCELLED
        assert backend.calls == 1

    @pytest.mark.asyncio
    async def test_run_parallel_keeps_input_order(self):
        backends = [
            FakeBackend("slow", text="slow", delay=0.05),
            FakeBackend("broken", errors=[BackendUnavailableError("broken", "gone")]),
            FakeBackend("fast", text="fast"),
        ]
        results = await BackendExecutor().run_parallel(backends, "p")

        assert [r.backend_id for r in results] == ["slow", "broken", "fast"]
        assert [r.ok for r in results] == [True, False, True]

    @pytest.mark.asyncio
    async def test_run_parallel_runs_concurrently(self):
        backends = [FakeBackend(f"b{i}", text="ok", delay=0.2) for i in range(3)]
        results = await asyncio.wait_for(
            BackendExecutor().run_parallel(backends, "p"), timeout=0.5,
        )
        assert all(r.ok for r in results)
