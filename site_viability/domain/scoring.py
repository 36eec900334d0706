"""Viability scoring engine - core heuristics for site decisions"""

import math

from site_viability.domain.categories import Verdict
from site_viability.domain.models import HardMetrics, ScoreComponents, ScoreComputation, SubScores
from site_viability.utils.math_utils import clamp, round_half_up

# Component bounds
SATURATION_PENALTY_MAX = 55
COMPETITOR_STRENGTH_PENALTY_MAX = 25
DEMAND_BONUS_MAX = 25
DIFFERENTIATION_BONUS_MAX = 10
COMPETITION_BADNESS_MAX = 80

# Rating at which competitors start adding strength penalty
RATING_BASELINE = 4.0

# Bands treated as premium positioning for the differentiation bonus
PREMIUM_BANDS = frozenset({"2-3", "4"})
LOW_COMPETITION_MAX_800M = 8


def calculate_score_components(hard_metrics: HardMetrics) -> ScoreComponents:
    """
    Compute the four clamped penalty/bonus components.

    Coefficients (empirically tuned, changes require revalidating scoring scenarios):
    - Saturation: 3.5*sqrt(same_800m) + 2.0*sqrt(same_1500m), capped at 55
    - Competitor strength: 10 points per rating star above 4.0 plus
      1.5*ln(1 + median reviews), capped at 25
    - Demand: 1.5*ln(1 + total reviews in 800m) + 0.15 per business in 800m,
      capped at 25. The log keeps a single hugely popular neighbour from dominating.
    - Differentiation: base 2, +6 for a price gap, +1 for a premium dominant band,
      +1 when at most 8 direct competitors sit within 800m, capped at 10
    """
    same_800 = max(0, hard_metrics.count_same_800m)
    same_1500 = max(0, hard_metrics.count_same_1500m)

    saturation_penalty = clamp(
        math.sqrt(same_800) * 3.5 + math.sqrt(same_1500) * 2.0,
        0,
        SATURATION_PENALTY_MAX,
    )

    competitor_strength_penalty = clamp(
        (hard_metrics.avg_rating_same - RATING_BASELINE) * 10
        + math.log1p(max(0, hard_metrics.median_reviews_same)) * 1.5,
        0,
        COMPETITOR_STRENGTH_PENALTY_MAX,
    )

    demand_bonus = clamp(
        math.log1p(max(0, hard_metrics.total_reviews_all_800m)) * 1.5
        + max(0, hard_metrics.density_all_800m) * 0.15,
        0,
        DEMAND_BONUS_MAX,
    )

    differentiation_bonus = clamp(
        _differentiation_signal(hard_metrics),
        0,
        DIFFERENTIATION_BONUS_MAX,
    )

    return ScoreComponents(
        saturation_penalty=saturation_penalty,
        competitor_strength_penalty=competitor_strength_penalty,
        demand_bonus=demand_bonus,
        differentiation_bonus=differentiation_bonus,
    )


def _differentiation_signal(hard_metrics: HardMetrics) -> float:
    signal = 2.0

    if hard_metrics.detected_price_gap.is_gap:
        signal += 6

    if hard_metrics.detected_price_gap.dominant in PREMIUM_BANDS:
        signal += 1

    if hard_metrics.count_same_800m <= LOW_COMPETITION_MAX_800M:
        signal += 1

    return signal


def calculate_viability_score(components: ScoreComponents) -> int:
    """Combine components into a 0-100 integer score"""
    raw = (
        100
        - components.saturation_penalty
        - components.competitor_strength_penalty
        + components.demand_bonus
        + components.differentiation_bonus
    )
    return round_half_up(clamp(raw, 0, 100))


def calculate_sub_scores(components: ScoreComponents) -> SubScores:
    """
    Rescale each component to 0-100 against its own bound.

    Competition is inverted: the combined penalties (capped at 80) eat into 100.
    """
    competition_badness = clamp(
        components.saturation_penalty + components.competitor_strength_penalty,
        0,
        COMPETITION_BADNESS_MAX,
    )

    return SubScores(
        competition_score=100 - round_half_up(competition_badness / COMPETITION_BADNESS_MAX * 100),
        demand_score=round_half_up(components.demand_bonus / DEMAND_BONUS_MAX * 100),
        differentiation_score=round_half_up(
            components.differentiation_bonus / DIFFERENTIATION_BONUS_MAX * 100
        ),
    )


def determine_verdict(score: int) -> Verdict:
    """
    Map viability score to a categorical verdict.

    Score bands:
    - 0 - 39:   DO_NOT_OPEN
    - 40 - 69:  OPEN_WITH_CONDITIONS
    - 70 - 100: OPEN
    """
    if score <= 39:
        return Verdict.DO_NOT_OPEN
    elif score <= 69:
        return Verdict.OPEN_WITH_CONDITIONS
    else:
        return Verdict.OPEN


def compute_score(hard_metrics: HardMetrics) -> ScoreComputation:
    """
    Main entry point: score hard metrics and pick a verdict.

    Pure and deterministic - identical metrics always yield identical output.
    """
    components = calculate_score_components(hard_metrics)
    viability_score = calculate_viability_score(components)

    return ScoreComputation(
        viability_score=viability_score,
        verdict=determine_verdict(viability_score),
        metrics=calculate_sub_scores(components),
        internal=components,
    )
