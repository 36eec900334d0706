"""Deterministic insight templates, model prompt, and model/fallback merge"""

import json
from dataclasses import asdict
from typing import Any, List, Mapping

from site_viability.domain.categories import BusinessCategory, RecommendationAngle, Verdict
from site_viability.domain.models import HardMetrics, InsightPack

BULLET_COUNT = 5

SYSTEM_PROMPT = (
    "You are an analyst. Use ONLY provided metrics. "
    "Return STRICT JSON with keys: bullets, summary, recommendationAngle."
)


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), sort_keys=True)


def build_fallback_insights(
    business_category: BusinessCategory,
    formatted_address: str,
    hard_metrics: HardMetrics,
    final_score: int,
    verdict: Verdict,
) -> InsightPack:
    """
    Template five bullets and a summary directly from the hard metrics.

    Always succeeds, including for all-zero metrics.
    """
    gap = hard_metrics.detected_price_gap
    category = BusinessCategory(business_category).value
    verdict_value = Verdict(verdict).value

    if gap.is_gap:
        gap_bullet = (
            f"There is a price gap (band {gap.dominant} dominates); "
            f"consider testing band {gap.suggested}."
        )
    else:
        gap_bullet = (
            "No strong price gap detected; the offer must stand out "
            "through experience and execution."
        )

    bullets = (
        f"Direct competitors within 800m: {hard_metrics.count_same_800m}; "
        f"within 1500m: {hard_metrics.count_same_1500m}.",
        f"Commercial density within 800m is {hard_metrics.density_all_800m} places "
        f"with {hard_metrics.total_reviews_all_800m} reviews in total.",
        f"Competitor quality: average rating {hard_metrics.avg_rating_same} "
        f"with a median of {hard_metrics.median_reviews_same} reviews.",
        f"Detected price level distribution: {_compact_json(hard_metrics.price_level_distribution)}.",
        gap_bullet,
    )

    summary = (
        f"For {category} at {formatted_address}, the final score is {final_score}/100 "
        f"with verdict {verdict_value}. The decision reflects local saturation, competitor "
        f"strength, and demand observed through reviews and commercial density."
    )

    return InsightPack(
        bullets=bullets,
        summary=summary,
        recommendation_angle=RecommendationAngle.PRICING if gap.is_gap else RecommendationAngle.SPECIALTY,
    )


def build_prompt(
    business_category: BusinessCategory,
    formatted_address: str,
    hard_metrics: HardMetrics,
    final_score: int,
    verdict: Verdict,
) -> str:
    """User payload for the generation provider, embedding every hard metric"""
    angles = ", ".join(angle.value for angle in RecommendationAngle)
    gap = {key: value for key, value in asdict(hard_metrics.detected_price_gap).items() if value is not None}

    return "\n".join(
        [
            f"Business category: {BusinessCategory(business_category).value}",
            f"Address: {formatted_address}",
            "",
            "Metrics:",
            f"count_same_800m={hard_metrics.count_same_800m}",
            f"count_same_1500m={hard_metrics.count_same_1500m}",
            f"density_all_800m={hard_metrics.density_all_800m}",
            f"avg_rating_same={hard_metrics.avg_rating_same}",
            f"median_reviews_same={hard_metrics.median_reviews_same}",
            f"total_reviews_all_800m={hard_metrics.total_reviews_all_800m}",
            f"count_food_drink_800m={hard_metrics.count_food_drink_800m}",
            f"price_level_distribution={_compact_json(hard_metrics.price_level_distribution)}",
            f"detected_price_gap={_compact_json(gap)}",
            f"finalScore={final_score}",
            f"verdict={Verdict(verdict).value}",
            "",
            "Task:",
            "1) Provide 5 actionable bullets grounded in metrics and include numbers.",
            "2) Provide a concise 2-3 sentence summary.",
            f"3) Suggest ONE recommendationAngle among: {angles}.",
            "Return JSON only.",
        ]
    )


def merge_insights(model_payload: Mapping[str, Any], fallback: InsightPack) -> InsightPack:
    """
    Merge a (possibly partial) model response into the fallback pack field by field.

    - bullets: string entries only, first 5 kept, missing positions backfilled
      from the fallback bullet at the same index
    - summary: non-blank string, stripped; otherwise the fallback summary
    - recommendationAngle: must be one of the allowed angles; otherwise the fallback angle
    """
    raw_bullets = model_payload.get("bullets")
    bullets: List[str] = []
    if isinstance(raw_bullets, list):
        bullets = [item for item in raw_bullets if isinstance(item, str)][:BULLET_COUNT]

    while len(bullets) < BULLET_COUNT:
        bullets.append(fallback.bullets[len(bullets)])

    raw_summary = model_payload.get("summary")
    summary = raw_summary.strip() if isinstance(raw_summary, str) and raw_summary.strip() else fallback.summary

    raw_angle = model_payload.get("recommendationAngle")
    try:
        angle = RecommendationAngle(raw_angle) if isinstance(raw_angle, str) else fallback.recommendation_angle
    except ValueError:
        angle = fallback.recommendation_angle

    return InsightPack(bullets=tuple(bullets), summary=summary, recommendation_angle=angle)

