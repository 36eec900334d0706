"""Analysis orchestrator - runs the full site viability pipeline per request"""

import hashlib
import logging
import re
import time
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Sequence

from site_viability.config import settings
from site_viability.domain.categories import CATEGORY_CONFIG, BusinessCategory, normalize_ticket_bucket
from site_viability.domain.features import build_hard_metrics
from site_viability.domain.models import (
    AnalysisResponse,
    CompetitorSummary,
    MapData,
    MapPoint,
    NormalizedInput,
    PhaseTimings,
    PlaceRecord,
    ReportLinks,
    RequestEcho,
)
from site_viability.domain.scoring import compute_score
from site_viability.infrastructure.observability.metrics import record_cache_lookup
from site_viability.infrastructure.storage.cache import TTLCache
from site_viability.infrastructure.storage.report_store import ReportStore
from site_viability.services.discovery import PlaceDiscovery, is_open, to_records
from site_viability.services.insights import InsightGenerator
from site_viability.utils.concurrency import gather_or_cancel

logger = logging.getLogger(__name__)

NEAR_RADIUS_M = 800
WIDE_RADIUS_M = 1500
TOP_COMPETITORS = 10

_WHITESPACE = re.compile(r"\s+")


def normalize_input(
    address: str,
    business_category: BusinessCategory | str,
    avg_ticket: str | int | float | None = None,
    country_bias: str | None = None,
    place_id: str | None = None,
) -> NormalizedInput:
    """Trim and collapse the address, bucket the ticket, default and upper-case the country"""
    bias = (country_bias or settings.default_country_bias).strip().upper()
    cleaned_place_id = place_id.strip() if place_id else None

    return NormalizedInput(
        address_raw=address,
        address=_WHITESPACE.sub(" ", address.strip()),
        business_category=BusinessCategory(business_category),
        country_bias=bias,
        avg_ticket=avg_ticket,
        ticket_bucket=normalize_ticket_bucket(avg_ticket),
        place_id=cleaned_place_id or None,
    )


def build_fingerprint(normalized: NormalizedInput) -> str:
    """Stable SHA-256 cache key over the normalized request fields"""
    payload = "|".join(
        [
            normalized.address.lower(),
            normalized.place_id or "",
            normalized.business_category.value,
            normalized.ticket_bucket.value if normalized.ticket_bucket else "",
            normalized.country_bias,
        ]
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def create_request_id() -> str:
    return f"req_{int(time.time() * 1000):x}_{uuid.uuid4().hex[:8]}"


def report_url_for(request_id: str) -> str:
    return f"/v1/report/{request_id}"


def select_top_competitors(places: Sequence[PlaceRecord], limit: int = TOP_COMPETITORS) -> List[CompetitorSummary]:
    """Most-reviewed competitors first"""
    ranked = sorted(places, key=lambda place: place.review_count, reverse=True)[:limit]
    return [
        CompetitorSummary(
            place_id=place.place_id,
            name=place.name,
            rating=place.rating,
            review_count=place.review_count,
            price_level=place.price_level,
            types=place.types,
            distance_m=place.distance_m,
        )
        for place in ranked
    ]


def _elapsed_ms(started: float) -> int:
    return int(round((time.perf_counter() - started) * 1000))


class AnalysisOrchestrator:
    """Composes discovery, features, scoring and insights for one request at a time"""

    def __init__(
        self,
        discovery: PlaceDiscovery,
        insight_generator: InsightGenerator,
        cache: TTLCache,
        report_store: ReportStore,
        cache_ttl_seconds: int | None = None,
    ):
        self.discovery = discovery
        self.insight_generator = insight_generator
        self.cache = cache
        self.report_store = report_store
        self.cache_ttl_seconds = cache_ttl_seconds if cache_ttl_seconds is not None else settings.cache_ttl_seconds

    async def analyze(
        self,
        address: str,
        business_category: BusinessCategory | str,
        avg_ticket: str | int | float | None = None,
        country_bias: str | None = None,
        place_id: str | None = None,
    ) -> AnalysisResponse:
        """
        Main entry point: produce a viability verdict for a proposed location.

        Flow:
        1. Normalize input and consult the result cache
        2. Geocode the address
        3. Run all-800m, same-category-800m and same-category-1500m searches concurrently
        4. Enrich the top same-category candidates with place details
        5. Extract hard metrics, score, pick verdict
        6. Generate insights (never fails)
        7. Assemble response, cache it, save it to the report store

        Raises:
            AddressNotFoundError, RateLimitedError, UpstreamTimeoutError, UpstreamError:
                Discovery failures abort the analysis
        """
        started = time.perf_counter()
        normalized = normalize_input(address, business_category, avg_ticket, country_bias, place_id)
        fingerprint = build_fingerprint(normalized)

        cached = self.cache.get(fingerprint)
        record_cache_lookup(cached is not None)
        if cached is not None:
            request_id = create_request_id()
            response = replace(
                cached,
                request_id=request_id,
                report=replace(cached.report, report_url=report_url_for(request_id)),
                cache_hit=True,
            )
            self.report_store.save(response)
            logger.info("Analysis served from cache", extra={"request_id": request_id})
            return response

        phase = time.perf_counter()
        location = await self.discovery.geocode(
            normalized.country_bias,
            address=normalized.address,
            place_id=normalized.place_id,
        )
        geocode_ms = _elapsed_ms(phase)

        category_config = CATEGORY_CONFIG[normalized.business_category]

        phase = time.perf_counter()
        all_800_summaries, same_800_summaries, same_1500_summaries = await gather_or_cancel(
            self.discovery.nearby_search(location, NEAR_RADIUS_M),
            self.discovery.same_category_search(
                location, category_config.primary_types, category_config.keyword, NEAR_RADIUS_M
            ),
            self.discovery.same_category_search(
                location, category_config.primary_types, category_config.keyword, WIDE_RADIUS_M
            ),
        )
        nearby_ms = _elapsed_ms(phase)

        all_800 = to_records(all_800_summaries, location)
        same_800 = [record for record in to_records(same_800_summaries, location) if is_open(record)]

        phase = time.perf_counter()
        same_1500 = await self.discovery.enrich_candidates(same_1500_summaries, location)
        details_ms = _elapsed_ms(phase)

        phase = time.perf_counter()
        hard_metrics = build_hard_metrics(
            same_800=same_800,
            same_1500=same_1500,
            all_800=all_800,
            ticket_bucket=normalized.ticket_bucket,
            is_food_category=category_config.is_food,
        )
        scoring = compute_score(hard_metrics)
        score_ms = _elapsed_ms(phase)

        phase = time.perf_counter()
        insights = await self.insight_generator.generate(
            business_category=normalized.business_category,
            formatted_address=location.formatted_address,
            hard_metrics=hard_metrics,
            final_score=scoring.viability_score,
            verdict=scoring.verdict,
        )
        llm_ms = _elapsed_ms(phase)

        request_id = create_request_id()
        competitors_top = tuple(select_top_competitors(same_1500))

        response = AnalysisResponse(
            request_id=request_id,
            input=RequestEcho(
                address=normalized.address,
                business_category=normalized.business_category,
                country_bias=normalized.country_bias,
                avg_ticket=normalized.avg_ticket,
            ),
            location=location,
            viability_score=scoring.viability_score,
            verdict=scoring.verdict,
            metrics=scoring.metrics,
            hard_metrics=hard_metrics,
            competitors_top=competitors_top,
            insights=insights.bullets,
            diagnosis=insights.summary,
            recommendation_angle=insights.recommendation_angle,
            map_data=MapData(
                center=MapPoint(lat=location.lat, lng=location.lng),
                competitors_top=competitors_top,
            ),
            report=ReportLinks(report_url=report_url_for(request_id)),
            timing_ms=PhaseTimings(
                geocode=geocode_ms,
                nearby=nearby_ms,
                details=details_ms,
                score=score_ms,
                llm=llm_ms,
                total=_elapsed_ms(started),
            ),
            generated_at=datetime.now(timezone.utc).isoformat(),
            cache_hit=False,
        )

        self.cache.set(fingerprint, response, self.cache_ttl_seconds)
        self.report_store.save(response)

        return response
