"""Pydantic schemas for API request/response validation"""

import math
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from site_viability.domain.categories import BusinessCategory, RecommendationAngle, TicketBucket, Verdict


class AnalyzeRequest(BaseModel):
    """Request body for POST /v1/analyze"""

    address: str = Field(..., min_length=4, max_length=220, description="Address to evaluate")
    business_category: BusinessCategory
    avg_ticket: str | int | float | None = Field(
        None, description="Average ticket: non-negative number or one of low|mid|high"
    )
    country_bias: Optional[str] = Field(None, min_length=2, max_length=2, description="Geocoding country, default AR")
    place_id: Optional[str] = Field(None, description="Provider place id for precise geocoding")

    @field_validator("avg_ticket", mode="before")
    @classmethod
    def validate_avg_ticket(cls, value):
        if value is None:
            return value
        if isinstance(value, bool):
            raise ValueError("avg_ticket must be a non-negative number or one of low|mid|high")
        if isinstance(value, (int, float)):
            if not math.isfinite(value) or value < 0:
                raise ValueError("avg_ticket must be a non-negative number or one of low|mid|high")
            return value
        if isinstance(value, str) and value.strip().lower() in {bucket.value for bucket in TicketBucket}:
            return value
        raise ValueError("avg_ticket must be a non-negative number or one of low|mid|high")


class ResponseModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class LocationSchema(ResponseModel):
    lat: float
    lng: float
    formatted_address: str
    place_id: Optional[str] = None


class SubScoresSchema(ResponseModel):
    competition_score: int = Field(..., ge=0, le=100)
    demand_score: int = Field(..., ge=0, le=100)
    differentiation_score: int = Field(..., ge=0, le=100)


class PriceGapSchema(ResponseModel):
    is_gap: bool
    suggested: Optional[str] = None
    dominant: Optional[str] = None
    detail: Optional[str] = None


class HardMetricsSchema(ResponseModel):
    count_same_800m: int
    count_same_1500m: int
    density_all_800m: int
    avg_rating_same: float
    median_reviews_same: float
    total_reviews_all_800m: int
    count_food_drink_800m: int
    price_level_distribution: Dict[str, int]
    detected_price_gap: PriceGapSchema


class CompetitorSchema(ResponseModel):
    place_id: str
    name: str
    rating: Optional[float] = None
    review_count: int
    price_level: Optional[int] = None
    types: List[str]
    distance_m: int


class RequestEchoSchema(ResponseModel):
    address: str
    business_category: BusinessCategory
    country_bias: str
    avg_ticket: str | int | float | None = None


class MapPointSchema(ResponseModel):
    lat: float
    lng: float


class MapDataSchema(ResponseModel):
    center: MapPointSchema
    competitors_top: List[CompetitorSchema]


class ReportLinksSchema(ResponseModel):
    report_url: str
    pdf_url: Optional[str] = None


class TimingsSchema(ResponseModel):
    geocode: int
    nearby: int
    details: int
    score: int
    llm: int
    total: int


class AnalyzeResponse(ResponseModel):
    """Response for POST /v1/analyze and GET /v1/report/{request_id}"""

    request_id: str
    input: RequestEchoSchema
    location: LocationSchema
    viability_score: int = Field(..., ge=0, le=100)
    verdict: Verdict
    metrics: SubScoresSchema
    hard_metrics: HardMetricsSchema
    competitors_top: List[CompetitorSchema]
    insights: List[str]
    diagnosis: str
    recommendation_angle: RecommendationAngle
    map_data: MapDataSchema
    report: ReportLinksSchema
    timing_ms: TimingsSchema
    generated_at: str
    cache_hit: bool
