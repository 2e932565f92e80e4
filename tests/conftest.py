"""Shared test fixtures for Concord."""

from __future__ import annotations

import asyncio
import time

import pytest

from concord.backends.base import BackendClient
from concord.models.config import AppConfig, BackendConfig
from concord.models.response import AIResponse, BackendIdentity, TierClass


class FakeBackend(BackendClient):
    """In-memory backend with scripted latency, failures and text."""

    def __init__(
        self,
        backend_id: str,
        text: str = "",
        delay: float = 0.0,
        errors: list[Exception] | None = None,
        tier: TierClass = TierClass.STANDARD,
        display_name: str | None = None,
    ):
        self._identity = BackendIdentity(
            id=backend_id, display_name=display_name or backend_id, tier_class=tier,
        )
        self.text = text
        self.delay = delay
        self.errors = list(errors or [])
        self.prompts: list[str] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def identify(self) -> BackendIdentity:
        return self._identity

    async def submit(self, prompt: str, cancel: asyncio.Event) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.errors:
            raise self.errors.pop(0)
        return self.text


def make_response(backend_id: str, text: str, display_name: str | None = None, **kwargs) -> AIResponse:
    """Build a successful AIResponse without running a backend."""
    identity = BackendIdentity(id=backend_id, display_name=display_name or backend_id)
    return AIResponse.succeeded(
        identity, text, started_at=kwargs.pop("started_at", time.time()),
        latency_ms=kwargs.pop("latency_ms", 10.0), **kwargs,
    )


@pytest.fixture
def fast_retry_config():
    """Config with fast retries for testing."""
    return AppConfig(max_retries=2, retry_base_delay=0.01, retry_max_delay=0.05)


@pytest.fixture
def sample_config():
    """Create a sample AppConfig for testing."""
    return AppConfig(
        max_retries=1,
        retry_base_delay=0.01,
        retry_max_delay=0.02,
        backends={
            "claude": BackendConfig(timeout=30),
            "codex": BackendConfig(timeout=30),
            "gemini": BackendConfig(timeout=30, optional=True),
        },
    )


@pytest.fixture
def python_answer():
    return (
        "Here is an object-oriented implementation of the algorithm.\n\n"
        "```python\n"
        "class Sorter:\n"
        "    def sort(self, items):\n"
        "        for i in range(len(items)):\n"
        "            if items[i] < 0:\n"
        "                raise ValueError('negative')\n"
        "        return sorted(items)\n"
        "```\n\n"
        "The function has O(n log n) complexity and good performance."
    )


@pytest.fixture
def functional_answer():
    return (
        "A functional approach uses map and filter over the array.\n\n"
        "```python\n"
        "result = list(filter(lambda x: x > 0, items))\n"
        "```\n\n"
        "This algorithm keeps the implementation short; performance is fine."
    )
