"""Place discovery - geocoding, multi-query competitor search, and detail enrichment"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from site_viability.config import settings
from site_viability.domain.exceptions import AddressNotFoundError
from site_viability.domain.models import PlaceRecord, PlaceSummary, ResolvedLocation
from site_viability.infrastructure.clients.places import PlacesClient
from site_viability.utils.concurrency import gather_or_cancel, map_with_concurrency
from site_viability.utils.geo import distance_in_meters

logger = logging.getLogger(__name__)

CLOSED_PERMANENTLY = "CLOSED_PERMANENTLY"


def is_open(place: PlaceSummary | PlaceRecord) -> bool:
    return place.business_status != CLOSED_PERMANENTLY


def to_record(place: PlaceSummary, location: ResolvedLocation) -> PlaceRecord:
    """Attach the distance from the resolved location to a place summary"""
    return PlaceRecord(
        place_id=place.place_id,
        name=place.name,
        lat=place.lat,
        lng=place.lng,
        distance_m=distance_in_meters(location.lat, location.lng, place.lat, place.lng),
        rating=place.rating,
        review_count=place.review_count,
        price_level=place.price_level,
        types=place.types,
        business_status=place.business_status,
    )


def to_records(places: Iterable[PlaceSummary], location: ResolvedLocation) -> List[PlaceRecord]:
    return [to_record(place, location) for place in places]


def dedupe_by_place_id(result_lists: Iterable[Sequence[PlaceSummary]]) -> List[PlaceSummary]:
    """
    Union of several result lists keyed by place id.

    Last writer wins for the payload; ordering follows first appearance.
    """
    merged: Dict[str, PlaceSummary] = {}
    for places in result_lists:
        for place in places:
            merged[place.place_id] = place
    return list(merged.values())


class PlaceDiscovery:
    """Gathers the commercial landscape around a location"""

    def __init__(
        self,
        client: PlacesClient,
        details_limit: int | None = None,
        details_concurrency: int | None = None,
    ):
        self.client = client
        self.details_limit = details_limit if details_limit is not None else settings.details_limit
        self.details_concurrency = (
            details_concurrency if details_concurrency is not None else settings.details_concurrency
        )

    async def geocode(
        self,
        country_bias: str,
        address: str | None = None,
        place_id: str | None = None,
    ) -> ResolvedLocation:
        """
        Resolve the request to a single location.

        Raises:
            AddressNotFoundError: Provider returned no usable result
            RateLimitedError, UpstreamTimeoutError, UpstreamError: From the client
        """
        location = await self.client.geocode(country_bias, address=address, place_id=place_id)
        if location is None:
            raise AddressNotFoundError(f"No usable location for {address or place_id!r}")
        return location

    async def nearby_search(
        self,
        location: ResolvedLocation,
        radius_m: int,
        place_type: str | None = None,
        keyword: str | None = None,
    ) -> List[PlaceSummary]:
        return await self.client.nearby_search(
            location.lat,
            location.lng,
            radius_m,
            place_type=place_type,
            keyword=keyword,
        )

    async def same_category_search(
        self,
        location: ResolvedLocation,
        types: Sequence[str],
        keyword: Optional[str],
        radius_m: int,
    ) -> List[PlaceSummary]:
        """
        One nearby search per category type plus one keyword search, run concurrently.

        Any failing query fails the whole search and cancels the queries still running.
        """
        searches = [self.nearby_search(location, radius_m, place_type=place_type) for place_type in types]
        if keyword:
            searches.append(self.nearby_search(location, radius_m, keyword=keyword))

        results = await gather_or_cancel(*searches)
        return dedupe_by_place_id(results)

    async def place_details(self, place_id: str) -> Optional[PlaceSummary]:
        return await self.client.place_details(place_id)

    async def enrich_candidates(
        self,
        candidates: Sequence[PlaceSummary],
        location: ResolvedLocation,
    ) -> List[PlaceRecord]:
        """
        Fetch full details for the most-reviewed open candidates.

        Closed places are dropped, the rest ranked by review count (descending, stable)
        and capped at details_limit. Details are fetched with at most
        details_concurrency calls in flight. A not-found lookup keeps the summary.
        Output preserves the ranking order.
        """
        ranked = sorted(
            (place for place in candidates if is_open(place)),
            key=lambda place: place.review_count,
            reverse=True,
        )[: self.details_limit]

        async def fetch(place: PlaceSummary, index: int) -> PlaceRecord:
            details = await self.place_details(place.place_id)
            if details is None:
                logger.info("Place details not found, keeping summary", extra={"place_id": place.place_id})
                return to_record(place, location)
            return to_record(details, location)

        enriched = await map_with_concurrency(ranked, self.details_concurrency, fetch)
        return [record for record in enriched if is_open(record)]
