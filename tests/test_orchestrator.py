"""Tests for the orchestrator."""

from __future__ import annotations

import asyncio
import json

import pytest

from concord.core.executor import BackendExecutor
from concord.core.orchestrator import Orchestrator
from concord.core.reviewer import ComparisonReviewer, build_review_prompt
from concord.exceptions import (
    BackendUnavailableError,
    InsufficientBackendsError,
    UnknownPromptError,
)
from concord.models.analysis import AnalysisResult
from concord.models.config import AppConfig
from concord.models.response import ErrorKind, TierClass
from concord.models.session import ComparisonSession

from conftest import FakeBackend, make_response

PROMPT = "How do I reverse a list?"


def _orchestrator(*backends, **kwargs) -> Orchestrator:
    catalog = {b.backend_id: b for b in backends}
    return Orchestrator(catalog, BackendExecutor(kwargs.get("config")), **kwargs)


class TestResolveBackends:
    """Tests for backend resolution."""

    def test_default_picks_cheapest_two(self):
        orch = _orchestrator(
            FakeBackend("std", tier=TierClass.STANDARD),
            FakeBackend("flag", tier=TierClass.FLAGSHIP),
            FakeBackend("eco", tier=TierClass.ECONOMICAL),
        )
        assert [b.backend_id for b in orch.resolve_backends()] == ["eco", "flag"]

    def test_default_keeps_catalog_order_within_tier(self):
        orch = _orchestrator(FakeBackend("one"), FakeBackend("two"), FakeBackend("three"))
        assert [b.backend_id for b in orch.resolve_backends()] == ["one", "two"]

    def test_explicit_ids_skip_unknown(self):
        orch = _orchestrator(FakeBackend("a"), FakeBackend("b"))
        assert [b.backend_id for b in orch.resolve_backends(["b", "missing", "a"])] == ["b", "a"]

    def test_configured_preferences(self):
        orch = _orchestrator(
            FakeBackend("a"), FakeBackend("b"), FakeBackend("c"),
            config=AppConfig(preferred_backends=["c", "a"]),
        )
        assert [b.backend_id for b in orch.resolve_backends()] == ["c", "a"]


class TestCompareAcrossBackends:
    """Tests for the concurrent fan-out."""

    @pytest.mark.asyncio
    async def test_ordered_by_start_not_completion(self):
        slow = FakeBackend("slow", text="slow answer", delay=0.05)
        fast = FakeBackend("fast", text="fast answer")
        orch = _orchestrator(slow, fast)

        responses = await orch.compare_across_backends(PROMPT, [slow, fast])

        assert [r.backend_id for r in responses] == ["slow", "fast"]
        assert responses[0].started_at <= responses[1].started_at

    @pytest.mark.asyncio
    async def test_one_failure_is_isolated(self):
        good = FakeBackend("good", text="fine")
        bad = FakeBackend("bad", errors=[BackendUnavailableError("bad", "Exited with code 1")])
        other = FakeBackend("other", text="also fine")
        orch = _orchestrator(good, bad, other)

        responses = await orch.compare_across_backends(PROMPT, [good, bad, other])

        by_id = {r.backend_id: r for r in responses}
        assert len(responses) == 3
        assert by_id["bad"].error_kind is ErrorKind.BACKEND_UNAVAILABLE
        assert by_id["good"].text == "fine"
        assert by_id["other"].text == "also fine"

    @pytest.mark.asyncio
    async def test_fewer_than_two_raises_before_any_request(self):
        only = FakeBackend("only", text="x")
        orch = _orchestrator(only)

        with pytest.raises(InsufficientBackendsError):
            await orch.compare_across_backends(PROMPT, [only])
        assert only.calls == 0

    @pytest.mark.asyncio
    async def test_duplicates_collapsed(self):
        a = FakeBackend("a", text="x")
        b = FakeBackend("b", text="y")
        orch = _orchestrator(a, b)

        with pytest.raises(InsufficientBackendsError):
            await orch.compare_across_backends(PROMPT, [a, a])

        responses = await orch.compare_across_backends(PROMPT, [a, b, a])
        assert [r.backend_id for r in responses] == ["a", "b"]
        assert a.calls == 1

    @pytest.mark.asyncio
    async def test_cancel_marks_every_pending_backend(self):
        backends = [FakeBackend(f"b{i}", text="late", delay=5.0) for i in range(3)]
        orch = _orchestrator(*backends)
        cancel = asyncio.Event()

        task = asyncio.create_task(orch.compare_across_backends(PROMPT, backends, cancel))
        await asyncio.sleep(0.01)
        cancel.set()
        responses = await asyncio.wait_for(task, timeout=1.0)

        assert [r.error_kind for r in responses] == [ErrorKind.CANCELLED] * 3

    @pytest.mark.asyncio
    async def test_completed_result_survives_cancel(self):
        done = FakeBackend("done", text="finished in time")
        pending = FakeBackend("pending", text="late", delay=5.0)
        orch = _orchestrator(done, pending)
        cancel = asyncio.Event()

        task = asyncio.create_task(orch.compare_across_backends(PROMPT, [done, pending], cancel))
        await asyncio.sleep(0.05)
        cancel.set()
        responses = await asyncio.wait_for(task, timeout=1.0)

        by_id = {r.backend_id: r for r in responses}
        assert by_id["done"].text == "finished in time"
        assert by_id["pending"].error_kind is ErrorKind.CANCELLED


class TestSession:
    """Tests for session start, add_backend and snapshots."""

    @pytest.mark.asyncio
    async def test_start_session_analyzes(self, python_answer, functional_answer):
        snapshots = []
        orch = _orchestrator(
            FakeBackend("a", text=python_answer),
            FakeBackend("b", text=functional_answer),
            on_snapshot=snapshots.append,
        )

        session = await orch.start_session(PROMPT, ["a", "b"])

        assert session.prompt == PROMPT
        assert session.analysis is not None
        assert set(session.analysis.code_analysis) == {"a", "b"}
        assert len(snapshots) == 1
        assert snapshots[0].analysis == session.analysis

    @pytest.mark.asyncio
    async def test_start_session_with_one_success(self):
        orch = _orchestrator(
            FakeBackend("a", text="only answer"),
            FakeBackend("b", errors=[BackendUnavailableError("b", "gone")]),
        )

        session = await orch.start_session(PROMPT, ["a", "b"])

        assert session.analysis is None
        assert "at least 2 successful" in session.analysis_note
        assert len(session.responses) == 2

    @pytest.mark.asyncio
    async def test_add_backend_reuses_prompt_and_recomputes(self):
        snapshots = []
        a = FakeBackend("a", text="The function returns an array.")
        b = FakeBackend("b", errors=[BackendUnavailableError("b", "gone")])
        c = FakeBackend("c", text="The function returns an array.")
        orch = _orchestrator(a, b, c, on_snapshot=snapshots.append)

        session = await orch.start_session(PROMPT, ["a", "b"])
        assert session.analysis is None

        await orch.add_backend(session, "c")

        assert c.prompts == [PROMPT]
        assert session.store.backend_ids == ["a", "b", "c"]
        assert session.analysis.overall_similarity == 1.0
        assert len(snapshots) == 2
        assert snapshots[0].analysis is None

    @pytest.mark.asyncio
    async def test_add_backend_overwrites_slot(self):
        a = FakeBackend("a", text="first take")
        b = FakeBackend("b", text="other")
        orch = _orchestrator(a, b)
        session = await orch.start_session(PROMPT, ["a", "b"])

        a.text = "second take"
        await orch.add_backend(session, "a")

        assert len(session.responses) == 2
        assert session.store.get("a").text == "second take"

    @pytest.mark.asyncio
    async def test_add_backend_requires_prompt(self):
        orch = _orchestrator(FakeBackend("a"))
        with pytest.raises(UnknownPromptError):
            await orch.add_backend(ComparisonSession(prompt=""), "a")

    @pytest.mark.asyncio
    async def test_add_unknown_backend_records_error(self):
        orch = _orchestrator(FakeBackend("a", text="x"), FakeBackend("b", text="y"))
        session = await orch.start_session(PROMPT, ["a", "b"])

        await orch.add_backend(session, "nope")

        missing = session.store.get("nope")
        assert missing.error_kind is ErrorKind.BACKEND_UNAVAILABLE
        assert "not found" in missing.error_message
        assert session.analysis is not None

    @pytest.mark.asyncio
    async def test_run_single(self):
        orch = _orchestrator(FakeBackend("a", text="solo"))
        assert (await orch.run_single("a", PROMPT)).text == "solo"
        assert (await orch.run_single("zzz", PROMPT)).error_kind is ErrorKind.BACKEND_UNAVAILABLE


class TestReviewer:
    """Tests for the model-assisted review."""

    def test_review_prompt_lists_responses(self):
        prompt = build_review_prompt(PROMPT, [
            make_response("claude", "Use reversed()."),
            make_response("codex", "Use slicing."),
        ])
        assert f'ORIGINAL PROMPT: "{PROMPT}"' in prompt
        assert "--- claude ---\nUse reversed()." in prompt
        assert "--- codex ---" in prompt

    @pytest.mark.asyncio
    async def test_review_attached_to_session(self):
        judge = FakeBackend("judge", text=json.dumps({
            "summary": "Both work.",
            "commonElements": ["built-ins"],
            "differences": {"a": ["reversed()"], "b": ["slicing"]},
            "recommendations": "Either is fine.",
        }))
        executor = BackendExecutor()
        orch = Orchestrator(
            {"a": FakeBackend("a", text="reversed"), "b": FakeBackend("b", text="slicing")},
            executor,
            reviewer=ComparisonReviewer(judge, executor),
        )

        session = await orch.start_session(PROMPT, ["a", "b"])

        assert session.review.summary == "Both work."
        assert session.review.unique_points["b"] == ("slicing",)
        assert judge.calls == 1

    @pytest.mark.asyncio
    async def test_malformed_review_is_degraded(self):
        judge = FakeBackend("judge", text="I refuse to answer in JSON")
        executor = BackendExecutor()
        orch = Orchestrator(
            {"a": FakeBackend("a", text="x"), "b": FakeBackend("b", text="y")},
            executor,
            reviewer=ComparisonReviewer(judge, executor),
        )

        session = await orch.start_session(PROMPT, ["a", "b"])

        assert session.review == AnalysisResult.degraded()

    @pytest.mark.asyncio
    async def test_review_skipped_without_two_successes(self):
        judge = FakeBackend("judge", text="{}")
        executor = BackendExecutor()
        orch = Orchestrator(
            {"a": FakeBackend("a", text="x"), "b": FakeBackend("b", errors=[BackendUnavailableError("b", "x")])},
            executor,
            reviewer=ComparisonReviewer(judge, executor),
        )

        session = await orch.start_session(PROMPT, ["a", "b"])

        assert session.review is None
        assert judge.calls == 0

    @pytest.mark.asyncio
    async def test_cancelled_add_backend_clears_previous_review(self):
        snapshots = []
        judge = FakeBackend("judge", text=json.dumps({"summary": "old set"}))
        executor = BackendExecutor()
        orch = Orchestrator(
            {
                "a": FakeBackend("a", text="x"),
                "b": FakeBackend("b", text="y"),
                "c": FakeBackend("c", text="z"),
            },
            executor,
            reviewer=ComparisonReviewer(judge, executor),
            on_snapshot=snapshots.append,
        )
        session = await orch.start_session(PROMPT, ["a", "b"])
        assert session.review.summary == "old set"

        cancel = asyncio.Event()
        cancel.set()
        await orch.add_backend(session, "c", cancel)

        assert session.store.backend_ids == ["a", "b", "c"]
        assert session.store.get("c").error_kind is ErrorKind.CANCELLED
        assert session.review is None
        assert snapshots[-1].review is None
        assert judge.calls == 1
