"""Parse a model-written review of a comparison into an AnalysisResult."""

from __future__ import annotations

from json_repair import repair_json

from concord.analysis.code_blocks import DEFAULT_LANGUAGE, extract_code_blocks
from concord.exceptions import MalformedUpstreamPayloadError
from concord.models.analysis import AnalysisResult, KeyDifference

MAX_COMMON_ELEMENTS = 5


def extract_json_object(raw: str) -> object:
    """Decode the outermost ``{...}`` in a reply, preferring a json fence.

    Models wrap JSON in prose, fences and trailing commas; json-repair
    handles the syntax, this only narrows down where the object is.
    """
    fenced = [b.code for b in extract_code_blocks(raw) if b.language in ("json", DEFAULT_LANGUAGE)]
    candidate = fenced[0] if fenced else raw

    start, end = candidate.find("{"), candidate.rfind("}")
    if start == -1 or end <= start:
        raise MalformedUpstreamPayloadError("Review payload holds no JSON object", raw)
    return repair_json(candidate[start:end + 1], return_objects=True)


def _as_strings(value: object) -> list[str]:
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    return []


def _as_text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_review_payload(raw: str, similarity: float = 0.0) -> AnalysisResult:
    """Build an AnalysisResult from the reviewer's JSON reply.

    Expected shape::

        {"summary": str, "commonElements": [str],
         "differences": {backend_id: [str]}, "recommendations": str}

    Raises:
        MalformedUpstreamPayloadError: The reply holds no usable JSON object.
    """
    if not raw or not raw.strip():
        raise MalformedUpstreamPayloadError("Empty review payload", raw)

    payload = extract_json_object(raw)
    if not isinstance(payload, dict) or not payload:
        raise MalformedUpstreamPayloadError("Review payload is not a JSON object", raw)

    differences = payload.get("differences") or {}
    if not isinstance(differences, dict):
        raise MalformedUpstreamPayloadError("'differences' must map backends to lists", raw)

    unique_points = {str(backend): tuple(_as_strings(points)) for backend, points in differences.items()}
    key_differences = [
        KeyDifference(aspect=backend, description="; ".join(points))
        for backend, points in unique_points.items()
        if points
    ]

    return AnalysisResult(
        overall_similarity=similarity,
        common_points=tuple(_as_strings(payload.get("commonElements"))[:MAX_COMMON_ELEMENTS]),
        key_differences=tuple(key_differences),
        unique_points=unique_points,
        summary=_as_text(payload.get("summary")),
        recommendations=_as_text(payload.get("recommendations")),
    )
