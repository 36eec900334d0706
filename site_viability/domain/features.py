"""Hard-metric extraction - turns place records into deterministic features"""

from typing import Dict, Optional, Sequence

from site_viability.domain.categories import TicketBucket
from site_viability.domain.models import HardMetrics, PlaceRecord, PriceGap
from site_viability.utils.math_utils import median, round2

FOOD_TYPES = frozenset({"restaurant", "cafe", "bakery", "bar", "meal_takeaway"})

# Rating assumed for a market where no competitor has been rated yet
DEFAULT_AVG_RATING = 4.0

PRICE_LEVELS = ("1", "2", "3", "4")
PRICE_BANDS = ("1", "2-3", "4")

DOMINANT_SHARE_THRESHOLD = 0.6
SUGGESTED_SHARE_CEILING = 0.15

_TICKET_TO_BAND = {
    TicketBucket.LOW: "1",
    TicketBucket.MID: "2-3",
    TicketBucket.HIGH: "4",
}


def build_hard_metrics(
    same_800: Sequence[PlaceRecord],
    same_1500: Sequence[PlaceRecord],
    all_800: Sequence[PlaceRecord],
    ticket_bucket: Optional[TicketBucket] = None,
    is_food_category: bool = False,
) -> HardMetrics:
    """
    Extract hard metrics from the three place sets.

    Args:
        same_800: Same-category places within 800m (closed places already removed)
        same_1500: Same-category places within 1500m, post-enrichment
        all_800: Every business within 800m
        ticket_bucket: Price positioning of the proposed business, if known
        is_food_category: Whether food/drink density is relevant for the category
    """
    ratings = [p.rating for p in same_1500 if p.rating is not None]
    reviews = [p.review_count for p in same_1500]

    avg_rating = round2(sum(ratings) / len(ratings)) if ratings else DEFAULT_AVG_RATING

    food_count = (
        sum(1 for p in all_800 if FOOD_TYPES.intersection(p.types))
        if is_food_category
        else 0
    )

    distribution = build_price_distribution(same_1500)

    return HardMetrics(
        count_same_800m=len(same_800),
        count_same_1500m=len(same_1500),
        density_all_800m=len(all_800),
        avg_rating_same=avg_rating,
        median_reviews_same=median(reviews),
        total_reviews_all_800m=sum(p.review_count for p in all_800),
        count_food_drink_800m=food_count,
        price_level_distribution=distribution,
        detected_price_gap=detect_price_gap(distribution, ticket_bucket),
    )


def build_price_distribution(places: Sequence[PlaceRecord]) -> Dict[str, int]:
    """Histogram of price levels 1-4; places without a price level are skipped"""
    distribution = {level: 0 for level in PRICE_LEVELS}

    for place in places:
        if place.price_level is None:
            continue
        level = max(1, min(4, place.price_level))
        distribution[str(level)] += 1

    return distribution


def ticket_to_band(ticket_bucket: Optional[TicketBucket]) -> Optional[str]:
    if ticket_bucket is None:
        return None
    return _TICKET_TO_BAND[TicketBucket(ticket_bucket)]


def detect_price_gap(distribution: Dict[str, int], ticket_bucket: Optional[TicketBucket]) -> PriceGap:
    """
    Decide whether the proposed price band is under-served.

    A gap requires a dominant band holding >= 60% of observations, a known
    suggested band, and either a different dominant band or a suggested band
    with <= 15% share.
    """
    total = sum(distribution.get(level, 0) for level in PRICE_LEVELS)
    if total == 0:
        return PriceGap(
            is_gap=False,
            detail="Not enough price level signal among competitors.",
        )

    bands = {
        "1": distribution.get("1", 0),
        "2-3": distribution.get("2", 0) + distribution.get("3", 0),
        "4": distribution.get("4", 0),
    }

    # max() keeps the first band on ties, so "1" beats "2-3" beats "4"
    dominant_band = max(PRICE_BANDS, key=lambda band: bands[band])
    dominant_share = bands[dominant_band] / total

    suggested_band = ticket_to_band(ticket_bucket)
    suggested_share = bands[suggested_band] / total if suggested_band else 0.0

    is_gap = (
        dominant_share >= DOMINANT_SHARE_THRESHOLD
        and suggested_band is not None
        and (suggested_band != dominant_band or suggested_share <= SUGGESTED_SHARE_CEILING)
    )

    if not is_gap:
        return PriceGap(
            is_gap=False,
            suggested=suggested_band,
            dominant=dominant_band,
            detail="No clear price gap against the dominant offer.",
        )

    return PriceGap(
        is_gap=True,
        suggested=suggested_band,
        dominant=dominant_band,
        detail=f"Price band {dominant_band} dominates the area; there is room for band {suggested_band}.",
    )
