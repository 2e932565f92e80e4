"""Model-assisted structured review of a comparison session."""

from __future__ import annotations

import asyncio

from concord.analysis.engine import calculate_similarity
from concord.analysis.payload import parse_review_payload
from concord.backends.base import BackendClient
from concord.core.executor import BackendExecutor
from concord.exceptions import MalformedUpstreamPayloadError
from concord.logger import log
from concord.models.analysis import AnalysisResult
from concord.models.response import AIResponse

REVIEW_PROMPT_TEMPLATE = """\
You are analyzing and comparing responses from multiple language models.

ORIGINAL PROMPT: "{prompt}"

MODEL RESPONSES:
{responses}

Return ONLY a JSON object with this structure (no markdown, no explanation):
{{
  "summary": "A brief summary of the key similarities and differences",
  "commonElements": ["elements that appear in most responses"],
  "differences": {{
    "<backend id>": ["unique elements or approaches of that backend"]
  }},
  "recommendations": "Overall assessment based on the comparison"
}}

Focus on common themes, unique insights of each backend, disagreements and
the overall usefulness of each response.
"""


def build_review_prompt(prompt: str, responses: list[AIResponse]) -> str:
    blocks = "\n".join(f"--- {r.backend_id} ---\n{r.text}\n" for r in responses)
    return REVIEW_PROMPT_TEMPLATE.format(prompt=prompt, responses=blocks)


class ComparisonReviewer:
    """Ask one backend to review the other backends' answers."""

    def __init__(self, backend: BackendClient, executor: BackendExecutor):
        self.backend = backend
        self.executor = executor

    async def review(
        self, prompt: str, responses: list[AIResponse], cancel: asyncio.Event | None = None
    ) -> AnalysisResult | None:
        """Return the parsed review, a degraded result on bad output, or None when skipped."""
        usable = [r for r in responses if r.ok]
        if len(usable) < 2:
            log.info("Skipping review: %d successful responses", len(usable))
            return None

        reply = await self.executor.run_single(
            self.backend, build_review_prompt(prompt, usable), cancel
        )
        if not reply.ok:
            log.warning("Reviewer %s failed (%s), using degraded review", reply.backend_id, reply.status_label)
            return AnalysisResult.degraded()

        similarity = calculate_similarity([r.text for r in usable])
        try:
            return parse_review_payload(reply.text, similarity=similarity)
        except MalformedUpstreamPayloadError as e:
            log.warning("Reviewer %s returned unusable output: %s", reply.backend_id, e)
            return AnalysisResult.degraded()
