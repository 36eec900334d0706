"""Google Geocoding / Places HTTP client"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from site_viability.config import settings
from site_viability.domain.exceptions import (
    AddressNotFoundError,
    RateLimitedError,
    UpstreamError,
    UpstreamTimeoutError,
)
from site_viability.domain.models import PlaceSummary, ResolvedLocation
from site_viability.infrastructure.observability.metrics import upstream_failures_counter

logger = logging.getLogger(__name__)

UPSTREAM = "GOOGLE_PLACES"

DETAILS_FIELD_MASK = "place_id,name,rating,user_ratings_total,price_level,types,business_status,geometry/location"

_OK_STATUSES = frozenset({"OK", "ZERO_RESULTS"})


class PlacesClient:
    """Client for geocoding, nearby search and place details"""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key or settings.google_maps_api_key
        self.base_url = (base_url or settings.places_base_url).rstrip("/")
        self.timeout = timeout or settings.upstream_timeout_seconds
        self._transport = transport

    async def geocode(
        self,
        country_bias: str,
        address: str | None = None,
        place_id: str | None = None,
    ) -> Optional[ResolvedLocation]:
        """
        Resolve an address (or a place id, which takes precedence) to a location.

        Returns None when the provider answers OK but the first result has no geometry.

        Raises:
            AddressNotFoundError: Neither input given, or provider returned ZERO_RESULTS
            RateLimitedError, UpstreamTimeoutError, UpstreamError: See _get_json
        """
        params: Dict[str, str] = {}
        if place_id:
            params["place_id"] = place_id
        elif address:
            params["address"] = address
            params["components"] = f"country:{country_bias}"
        else:
            raise AddressNotFoundError("Neither address nor place id supplied for geocoding")

        payload = await self._get_json("geocode/json", params)
        self._assert_status(payload)

        if payload.get("status") == "ZERO_RESULTS":
            raise AddressNotFoundError(f"No location found for {address or place_id!r}")

        return map_geocode(payload)

    async def nearby_search(
        self,
        lat: float,
        lng: float,
        radius_m: int,
        place_type: str | None = None,
        keyword: str | None = None,
    ) -> List[PlaceSummary]:
        """Nearby search around a point; an empty list is a valid answer"""
        params = {
            "location": f"{lat},{lng}",
            "radius": str(radius_m),
        }
        if place_type:
            params["type"] = place_type
        if keyword:
            params["keyword"] = keyword

        payload = await self._get_json("place/nearbysearch/json", params)
        self._assert_status(payload)
        return map_nearby(payload, fallback_lat=lat, fallback_lng=lng)

    async def place_details(self, place_id: str) -> Optional[PlaceSummary]:
        """Full details for one place; None when the provider reports NOT_FOUND"""
        payload = await self._get_json(
            "place/details/json",
            {"place_id": place_id, "fields": DETAILS_FIELD_MASK},
        )

        if payload.get("status") == "NOT_FOUND":
            upstream_failures_counter.labels(upstream=UPSTREAM, kind="not_found").inc()
            return None

        self._assert_status(payload)
        return map_details(payload)

    async def _get_json(self, path: str, params: Dict[str, str]) -> Dict[str, Any]:
        """
        Perform one GET against the provider. Single attempt, no retries.

        Raises:
            RateLimitedError: HTTP 429
            UpstreamTimeoutError: On any httpx timeout
            UpstreamError: Missing API key, transport failure, non-2xx, or non-JSON body
        """
        if not self.api_key:
            raise UpstreamError(UPSTREAM, "GOOGLE_MAPS_API_KEY is not configured")

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/{path}",
                    params={**params, "key": self.api_key},
                )
            except httpx.TimeoutException as e:
                upstream_failures_counter.labels(upstream=UPSTREAM, kind="timeout").inc()
                logger.warning("Places timeout", extra={"path": path, "timeout_seconds": self.timeout})
                raise UpstreamTimeoutError(UPSTREAM, self.timeout) from e
            except httpx.RequestError as e:
                upstream_failures_counter.labels(upstream=UPSTREAM, kind="error").inc()
                raise UpstreamError(UPSTREAM, f"Could not reach Places API: {e}") from e

        if response.status_code == 429:
            upstream_failures_counter.labels(upstream=UPSTREAM, kind="rate_limited").inc()
            raise RateLimitedError(UPSTREAM)

        if response.is_error:
            upstream_failures_counter.labels(upstream=UPSTREAM, kind="error").inc()
            raise UpstreamError(
                UPSTREAM,
                f"Places API HTTP error: {response.status_code}",
                status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            upstream_failures_counter.labels(upstream=UPSTREAM, kind="error").inc()
            raise UpstreamError(UPSTREAM, "Places API returned a non-JSON body") from e

        if not isinstance(payload, dict):
            upstream_failures_counter.labels(upstream=UPSTREAM, kind="error").inc()
            raise UpstreamError(UPSTREAM, "Places API returned an unexpected body")

        return payload

    def _assert_status(self, payload: Dict[str, Any]) -> None:
        status = payload.get("status")
        if status in _OK_STATUSES:
            return

        if status == "OVER_QUERY_LIMIT":
            upstream_failures_counter.labels(upstream=UPSTREAM, kind="rate_limited").inc()
            raise RateLimitedError(UPSTREAM)

        upstream_failures_counter.labels(upstream=UPSTREAM, kind="error").inc()
        logger.error(
            "Places non-success status",
            extra={"status": status, "error_message": payload.get("error_message")},
        )
        raise UpstreamError(
            UPSTREAM,
            "Places API returned a non-success status",
            status=status,
            detail=payload.get("error_message"),
        )


def _location(raw: Dict[str, Any]) -> Dict[str, Any]:
    return (raw.get("geometry") or {}).get("location") or {}


def map_geocode(payload: Dict[str, Any]) -> Optional[ResolvedLocation]:
    """First geocode result as a ResolvedLocation; None when it has no geometry"""
    results = payload.get("results") or []
    if not results:
        return None

    candidate = results[0]
    location = _location(candidate)
    if "lat" not in location or "lng" not in location:
        return None

    return ResolvedLocation(
        lat=float(location["lat"]),
        lng=float(location["lng"]),
        formatted_address=candidate.get("formatted_address") or "",
        place_id=candidate.get("place_id"),
    )


def _to_summary(raw: Dict[str, Any], fallback_name: str, fallback_lat: float, fallback_lng: float) -> PlaceSummary:
    location = _location(raw)
    price_level = raw.get("price_level")
    rating = raw.get("rating")

    return PlaceSummary(
        place_id=raw["place_id"],
        name=raw.get("name") or fallback_name,
        lat=float(location.get("lat", fallback_lat)),
        lng=float(location.get("lng", fallback_lng)),
        rating=float(rating) if rating is not None else None,
        review_count=int(raw.get("user_ratings_total") or 0),
        price_level=int(price_level) if price_level is not None else None,
        types=tuple(raw.get("types") or ()),
        business_status=raw.get("business_status"),
    )


def map_nearby(payload: Dict[str, Any], fallback_lat: float, fallback_lng: float) -> List[PlaceSummary]:
    """
    Map nearby-search results, dropping entries without a place id.

    Places without coordinates are placed at the search centre.
    """
    return [
        _to_summary(raw, "", fallback_lat, fallback_lng)
        for raw in payload.get("results") or []
        if raw.get("place_id")
    ]


def map_details(payload: Dict[str, Any]) -> Optional[PlaceSummary]:
    result = payload.get("result") or {}
    if not result.get("place_id"):
        return None
    return _to_summary(result, "Unknown", 0.0, 0.0)
