"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from site_viability.domain.categories import (
    BusinessCategory,
    RecommendationAngle,
    TicketBucket,
    Verdict,
)


@dataclass(frozen=True)
class NormalizedInput:
    """Analysis request after trimming and bucketing"""

    address_raw: str
    address: str
    business_category: BusinessCategory
    country_bias: str
    avg_ticket: str | int | float | None = None
    ticket_bucket: Optional[TicketBucket] = None
    place_id: Optional[str] = None


@dataclass(frozen=True)
class ResolvedLocation:
    """Geocoded point the whole analysis is centred on"""

    lat: float
    lng: float
    formatted_address: str
    place_id: Optional[str] = None


@dataclass(frozen=True)
class PlaceSummary:
    """Place as returned by nearby search or details lookup"""

    place_id: str
    name: str
    lat: float
    lng: float
    rating: Optional[float] = None
    review_count: int = 0
    price_level: Optional[int] = None
    types: Tuple[str, ...] = ()
    business_status: Optional[str] = None  # e.g. "OPERATIONAL", "CLOSED_PERMANENTLY"


@dataclass(frozen=True)
class PlaceRecord:
    """Place summary with its distance to the resolved location"""

    place_id: str
    name: str
    lat: float
    lng: float
    distance_m: int
    rating: Optional[float] = None
    review_count: int = 0
    price_level: Optional[int] = None
    types: Tuple[str, ...] = ()
    business_status: Optional[str] = None


@dataclass(frozen=True)
class PriceGap:
    """Outcome of comparing the dominant price band with the ticket band"""

    is_gap: bool
    suggested: Optional[str] = None
    dominant: Optional[str] = None
    detail: Optional[str] = None


@dataclass(frozen=True)
class HardMetrics:
    """Deterministic features extracted from place data"""

    count_same_800m: int
    count_same_1500m: int
    density_all_800m: int
    avg_rating_same: float
    median_reviews_same: float
    total_reviews_all_800m: int
    count_food_drink_800m: int
    price_level_distribution: Dict[str, int]
    detected_price_gap: PriceGap


@dataclass(frozen=True)
class SubScores:
    """Externally exposed 0-100 sub-scores"""

    competition_score: int
    demand_score: int
    differentiation_score: int


@dataclass(frozen=True)
class ScoreComponents:
    """Clamped penalty/bonus terms behind the viability score"""

    saturation_penalty: float
    competitor_strength_penalty: float
    demand_bonus: float
    differentiation_bonus: float


@dataclass(frozen=True)
class ScoreComputation:
    """Output of the scoring engine plus the verdict"""

    viability_score: int
    verdict: Verdict
    metrics: SubScores
    internal: ScoreComponents


@dataclass(frozen=True)
class InsightPack:
    """Five bullets, a summary and one recommendation angle"""

    bullets: Tuple[str, ...]
    summary: str
    recommendation_angle: RecommendationAngle


@dataclass(frozen=True)
class CompetitorSummary:
    """Competitor entry exposed in the response and map data"""

    place_id: str
    name: str
    rating: Optional[float]
    review_count: int
    price_level: Optional[int]
    types: Tuple[str, ...]
    distance_m: int


@dataclass(frozen=True)
class RequestEcho:
    address: str
    business_category: BusinessCategory
    country_bias: str
    avg_ticket: str | int | float | None = None


@dataclass(frozen=True)
class MapPoint:
    lat: float
    lng: float


@dataclass(frozen=True)
class MapData:
    center: MapPoint
    competitors_top: Tuple[CompetitorSummary, ...]


@dataclass(frozen=True)
class ReportLinks:
    report_url: str
    pdf_url: Optional[str] = None


@dataclass(frozen=True)
class PhaseTimings:
    """Per-phase wall time in milliseconds (measurement only)"""

    geocode: int = 0
    nearby: int = 0
    details: int = 0
    score: int = 0
    llm: int = 0
    total: int = 0


@dataclass(frozen=True)
class AnalysisResponse:
    """Complete analysis result, cached by fingerprint and stored by request id"""

    request_id: str
    input: RequestEcho
    location: ResolvedLocation
    viability_score: int
    verdict: Verdict
    metrics: SubScores
    hard_metrics: HardMetrics
    competitors_top: Tuple[CompetitorSummary, ...]
    insights: Tuple[str, ...]
    diagnosis: str
    recommendation_angle: RecommendationAngle
    map_data: MapData
    report: ReportLinks
    timing_ms: PhaseTimings = field(default_factory=PhaseTimings)
    generated_at: str = ""
    cache_hit: bool = False
