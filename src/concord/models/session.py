"""Comparison session and its response store."""

from __future__ import annotations

from dataclasses import dataclass, field

from concord.models.analysis import AnalysisResult
from concord.models.response import AIResponse


class ResponseStore:
    """Current map of backend id to response for one session.

    Each backend id owns exactly one slot; writing it again replaces it.
    """

    def __init__(self, responses: list[AIResponse] | None = None):
        self._slots: dict[str, AIResponse] = {}
        for response in responses or []:
            self.put(response)

    def put(self, response: AIResponse) -> None:
        self._slots[response.backend_id] = response

    def get(self, backend_id: str) -> AIResponse | None:
        return self._slots.get(backend_id)

    def responses(self) -> list[AIResponse]:
        """All entries ordered by task start time."""
        return sorted(self._slots.values(), key=lambda r: r.started_at)

    def successful(self) -> list[AIResponse]:
        return [r for r in self.responses() if r.ok]

    @property
    def backend_ids(self) -> list[str]:
        return [r.backend_id for r in self.responses()]

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, backend_id: object) -> bool:
        return backend_id in self._slots


@dataclass(frozen=True)
class SessionSnapshot:
    """Point-in-time view handed to the presentation layer."""

    prompt: str
    responses: tuple[AIResponse, ...]
    analysis: AnalysisResult | None
    analysis_note: str | None = None
    review: AnalysisResult | None = None

    @property
    def successful(self) -> tuple[AIResponse, ...]:
        return tuple(r for r in self.responses if r.ok)

    @property
    def failed(self) -> tuple[AIResponse, ...]:
        return tuple(r for r in self.responses if not r.ok)


@dataclass
class ComparisonSession:
    """Lifecycle of one prompt's comparison."""

    prompt: str
    store: ResponseStore = field(default_factory=ResponseStore)
    analysis: AnalysisResult | None = None
    analysis_note: str | None = None
    review: AnalysisResult | None = None

    @property
    def responses(self) -> list[AIResponse]:
        return self.store.responses()

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            prompt=self.prompt,
            responses=tuple(self.store.responses()),
            analysis=self.analysis,
            analysis_note=self.analysis_note,
            review=self.review,
        )
