"""Insight generation with model-backed path and deterministic fallback"""

import logging

from site_viability.domain.categories import BusinessCategory, Verdict
from site_viability.domain.exceptions import InsightGenerationError
from site_viability.domain.insights import (
    SYSTEM_PROMPT,
    build_fallback_insights,
    build_prompt,
    merge_insights,
)
from site_viability.domain.models import HardMetrics, InsightPack
from site_viability.infrastructure.clients.llm import LLMClient
from site_viability.infrastructure.observability.metrics import insight_fallback_counter

logger = logging.getLogger(__name__)


class InsightGenerator:
    """Produces an InsightPack; never raises to the caller"""

    def __init__(self, llm_client: LLMClient | None = None):
        self.llm_client = llm_client

    @property
    def model_enabled(self) -> bool:
        return self.llm_client is not None and self.llm_client.is_enabled

    async def generate(
        self,
        business_category: BusinessCategory,
        formatted_address: str,
        hard_metrics: HardMetrics,
        final_score: int,
        verdict: Verdict,
    ) -> InsightPack:
        """
        Build insights for a scored location.

        The fallback pack is always built first. When a provider is configured its
        answer is merged over the fallback field by field; any provider failure
        returns the fallback unchanged.
        """
        fallback = build_fallback_insights(
            business_category, formatted_address, hard_metrics, final_score, verdict
        )

        if not self.model_enabled:
            insight_fallback_counter.labels(reason="disabled").inc()
            return fallback

        prompt = build_prompt(business_category, formatted_address, hard_metrics, final_score, verdict)

        try:
            payload = await self.llm_client.generate_insights(SYSTEM_PROMPT, prompt)
        except InsightGenerationError as e:
            insight_fallback_counter.labels(reason="model_error").inc()
            logger.warning("Insight generation failed, using fallback", extra={"error": str(e)})
            return fallback
        except Exception:
            insight_fallback_counter.labels(reason="model_error").inc()
            logger.exception("Unexpected insight generation error, using fallback")
            return fallback

        return merge_insights(payload, fallback)
