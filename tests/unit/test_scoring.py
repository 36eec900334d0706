"""Unit tests for viability scoring logic"""

import pytest

from conftest import make_hard_metrics
from site_viability.domain.categories import Verdict
from site_viability.domain.models import PriceGap, ScoreComponents
from site_viability.domain.scoring import (
    calculate_score_components,
    calculate_sub_scores,
    calculate_viability_score,
    compute_score,
    determine_verdict,
)


@pytest.fixture
def busy_mid_market_metrics():
    """Dense cafe district where the mid price band dominates"""
    return make_hard_metrics(
        count_same_800m=14,
        count_same_1500m=38,
        density_all_800m=220,
        avg_rating_same=4.3,
        median_reviews_same=180,
        total_reviews_all_800m=42000,
        price_level_distribution={"1": 5, "2": 20, "3": 12, "4": 1},
        detected_price_gap=PriceGap(is_gap=False, suggested="2-3", dominant="2-3"),
    )


def test_busy_mid_market_scores_open(busy_mid_market_metrics):
    """Test the reference scenario end to end through compute_score"""
    result = compute_score(busy_mid_market_metrics)

    # 100 - 25.42 (saturation) - 10.80 (strength) + 25 (demand, capped) + 3 (differentiation)
    assert result.viability_score == 92
    assert 0 < result.viability_score < 100
    assert result.verdict == Verdict.OPEN
    assert result.metrics.competition_score == 55
    assert result.metrics.demand_score == 100
    assert result.metrics.differentiation_score == 30


def test_components_for_busy_mid_market(busy_mid_market_metrics):
    """Test each component against its formula"""
    components = calculate_score_components(busy_mid_market_metrics)

    assert components.saturation_penalty == pytest.approx(25.42, abs=0.01)
    assert components.competitor_strength_penalty == pytest.approx(10.80, abs=0.01)
    assert components.demand_bonus == 25
    # base 2 + premium dominant band; 14 direct competitors is too many for the low-competition point
    assert components.differentiation_bonus == 3


def test_compute_score_is_deterministic(busy_mid_market_metrics):
    """Test identical metrics always yield identical output"""
    assert compute_score(busy_mid_market_metrics) == compute_score(busy_mid_market_metrics)


def test_empty_market_scores_full_marks():
    """Test all-zero metrics: no penalties, base differentiation, score clamped at 100"""
    result = compute_score(make_hard_metrics())

    assert result.internal.saturation_penalty == 0
    assert result.internal.competitor_strength_penalty == 0
    assert result.internal.demand_bonus == 0
    assert result.internal.differentiation_bonus == 3
    assert result.viability_score == 100
    assert result.verdict == Verdict.OPEN
    assert result.metrics.competition_score == 100
    assert result.metrics.demand_score == 0
    assert result.metrics.differentiation_score == 30


def test_saturated_market_hits_every_cap():
    """Test extreme competition clamps penalties at their bounds"""
    metrics = make_hard_metrics(
        count_same_800m=10_000,
        count_same_1500m=100_000,
        avg_rating_same=5.0,
        median_reviews_same=1_000_000,
    )

    result = compute_score(metrics)

    assert result.internal.saturation_penalty == 55
    assert result.internal.competitor_strength_penalty == 25
    assert result.internal.differentiation_bonus == 2
    # 100 - 55 - 25 + 0 + 2
    assert result.viability_score == 22
    assert result.verdict == Verdict.DO_NOT_OPEN
    assert result.metrics.competition_score == 0


def test_weak_competitors_add_no_strength_penalty():
    """Test ratings below the baseline are clamped to zero penalty"""
    metrics = make_hard_metrics(avg_rating_same=3.0, median_reviews_same=0)

    components = calculate_score_components(metrics)

    assert components.competitor_strength_penalty == 0


def test_price_gap_earns_differentiation():
    """Test a detected gap under a premium dominant band with few competitors"""
    metrics = make_hard_metrics(
        count_same_800m=3,
        detected_price_gap=PriceGap(is_gap=True, suggested="1", dominant="2-3"),
    )

    components = calculate_score_components(metrics)

    # 2 + 6 (gap) + 1 (premium dominant) + 1 (<= 8 direct competitors)
    assert components.differentiation_bonus == 10
    assert calculate_sub_scores(components).differentiation_score == 100


def test_negative_counts_are_treated_as_zero():
    """Test defensive handling of malformed negative inputs"""
    metrics = make_hard_metrics(count_same_800m=-5, count_same_1500m=-1, total_reviews_all_800m=-10)

    components = calculate_score_components(metrics)

    assert components.saturation_penalty == 0
    assert components.demand_bonus == 0


def test_viability_score_rounds_half_up():
    """Test .5 raw scores round up rather than to even"""
    components = ScoreComponents(
        saturation_penalty=30.5,
        competitor_strength_penalty=0,
        demand_bonus=0,
        differentiation_bonus=0,
    )

    # raw 69.5
    assert calculate_viability_score(components) == 70


@pytest.mark.parametrize(
    "score, expected",
    [
        (0, Verdict.DO_NOT_OPEN),
        (39, Verdict.DO_NOT_OPEN),
        (40, Verdict.OPEN_WITH_CONDITIONS),
        (69, Verdict.OPEN_WITH_CONDITIONS),
        (70, Verdict.OPEN),
        (100, Verdict.OPEN),
    ],
)
def test_determine_verdict_boundaries(score, expected):
    """Test verdict thresholds at their edges"""
    assert determine_verdict(score) == expected


def test_sub_scores_stay_in_range():
    """Test sub-scores are bounded even with every component at its cap"""
    components = ScoreComponents(
        saturation_penalty=55,
        competitor_strength_penalty=25,
        demand_bonus=25,
        differentiation_bonus=10,
    )

    sub_scores = calculate_sub_scores(components)

    assert sub_scores.competition_score == 0
    assert sub_scores.demand_score == 100
    assert sub_scores.differentiation_score == 100
