"""Pytest fixtures for testing"""

import asyncio
from typing import Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from site_viability.api.dependencies import (
    get_llm_client,
    get_places_client,
    get_report_store,
    get_result_cache,
)
from site_viability.api.main import create_app
from site_viability.domain.models import (
    HardMetrics,
    PlaceRecord,
    PlaceSummary,
    PriceGap,
    ResolvedLocation,
)
from site_viability.infrastructure.clients.llm import LLMClient
from site_viability.infrastructure.clients.places import PlacesClient
from site_viability.infrastructure.storage.cache import TTLCache
from site_viability.infrastructure.storage.report_store import ReportStore

CENTER_LAT = -34.5952
CENTER_LNG = -58.3974


def make_summary(
    place_id: str,
    review_count: int = 0,
    rating: Optional[float] = None,
    price_level: Optional[int] = None,
    types: Tuple[str, ...] = ("cafe",),
    business_status: Optional[str] = "OPERATIONAL",
    name: Optional[str] = None,
    lat: float = CENTER_LAT,
    lng: float = CENTER_LNG,
) -> PlaceSummary:
    return PlaceSummary(
        place_id=place_id,
        name=name or f"Place {place_id}",
        lat=lat,
        lng=lng,
        rating=rating,
        review_count=review_count,
        price_level=price_level,
        types=types,
        business_status=business_status,
    )


def make_record(
    place_id: str,
    review_count: int = 0,
    rating: Optional[float] = None,
    price_level: Optional[int] = None,
    types: Tuple[str, ...] = ("cafe",),
    business_status: Optional[str] = "OPERATIONAL",
    distance_m: int = 100,
) -> PlaceRecord:
    return PlaceRecord(
        place_id=place_id,
        name=f"Place {place_id}",
        lat=CENTER_LAT,
        lng=CENTER_LNG,
        distance_m=distance_m,
        rating=rating,
        review_count=review_count,
        price_level=price_level,
        types=types,
        business_status=business_status,
    )


def make_hard_metrics(**overrides) -> HardMetrics:
    """All-zero metrics (with the 4.0 rating default) unless overridden"""
    values = dict(
        count_same_800m=0,
        count_same_1500m=0,
        density_all_800m=0,
        avg_rating_same=4.0,
        median_reviews_same=0,
        total_reviews_all_800m=0,
        count_food_drink_800m=0,
        price_level_distribution={"1": 0, "2": 0, "3": 0, "4": 0},
        detected_price_gap=PriceGap(is_gap=False),
    )
    values.update(overrides)
    return HardMetrics(**values)


@pytest.fixture
def location() -> ResolvedLocation:
    return ResolvedLocation(
        lat=CENTER_LAT,
        lng=CENTER_LNG,
        formatted_address="Av. Santa Fe 2300, CABA, Argentina",
        place_id="ChIJ-center",
    )


class FakePlacesClient:
    """In-memory stand-in for PlacesClient used by service-level tests"""

    def __init__(self, location: Optional[ResolvedLocation] = None):
        self.location = location
        self.geocode_error: Optional[Exception] = None
        self.nearby_results: Dict[Tuple[int, Optional[str], Optional[str]], List[PlaceSummary]] = {}
        self.details: Dict[str, PlaceSummary] = {}
        self.detail_delays: Dict[str, float] = {}
        self.geocode_calls = 0
        self.nearby_calls: List[Tuple[int, Optional[str], Optional[str]]] = []
        self.detail_calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def geocode(self, country_bias, address=None, place_id=None):
        self.geocode_calls += 1
        if self.geocode_error is not None:
            raise self.geocode_error
        return self.location

    async def nearby_search(self, lat, lng, radius_m, place_type=None, keyword=None):
        key = (radius_m, place_type, keyword)
        self.nearby_calls.append(key)
        return list(self.nearby_results.get(key, []))

    async def place_details(self, place_id):
        self.detail_calls.append(place_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.detail_delays.get(place_id, 0.001))
            return self.details.get(place_id)
        finally:
            self.in_flight -= 1


@pytest.fixture
def fake_places(location: ResolvedLocation) -> FakePlacesClient:
    return FakePlacesClient(location)


def raw_place(
    place_id: str,
    reviews: Optional[int] = 0,
    rating: Optional[float] = None,
    price_level: Optional[int] = None,
    types: Tuple[str, ...] = ("cafe",),
    business_status: Optional[str] = "OPERATIONAL",
    lat: float = CENTER_LAT + 0.001,
    lng: float = CENTER_LNG,
) -> dict:
    """Place payload shaped like the Google Places JSON API"""
    payload = {
        "place_id": place_id,
        "name": f"Place {place_id}",
        "types": list(types),
        "business_status": business_status,
        "geometry": {"location": {"lat": lat, "lng": lng}},
    }
    if reviews is not None:
        payload["user_ratings_total"] = reviews
    if rating is not None:
        payload["rating"] = rating
    if price_level is not None:
        payload["price_level"] = price_level
    return payload


class FakeGoogleAPI:
    """httpx.MockTransport handler emulating Geocoding, Nearby Search and Details"""

    def __init__(self):
        self.geocode_payload: dict = {
            "status": "OK",
            "results": [
                {
                    "formatted_address": "Av. Santa Fe 2300, CABA, Argentina",
                    "place_id": "ChIJ-center",
                    "geometry": {"location": {"lat": CENTER_LAT, "lng": CENTER_LNG}},
                }
            ],
        }
        self.nearby: Dict[Tuple[int, Optional[str], Optional[str]], List[dict]] = {}
        self.nearby_status: Optional[str] = None
        self.details: Dict[str, dict] = {}
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        params = request.url.params

        if path.endswith("/geocode/json"):
            return httpx.Response(200, json=self.geocode_payload)

        if path.endswith("/place/nearbysearch/json"):
            if self.nearby_status is not None:
                return httpx.Response(200, json={"status": self.nearby_status})
            key = (int(params["radius"]), params.get("type"), params.get("keyword"))
            results = self.nearby.get(key, [])
            return httpx.Response(200, json={"status": "OK" if results else "ZERO_RESULTS", "results": results})

        if path.endswith("/place/details/json"):
            result = self.details.get(params["place_id"])
            if result is None:
                return httpx.Response(200, json={"status": "NOT_FOUND"})
            return httpx.Response(200, json={"status": "OK", "result": result})

        return httpx.Response(404)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def google_api() -> FakeGoogleAPI:
    return FakeGoogleAPI()


@pytest.fixture
def cafe_google_api(google_api: FakeGoogleAPI) -> FakeGoogleAPI:
    """A small CAFE neighbourhood: 2 open cafes within 800m, 3 within 1500m, 5 businesses within 800m"""
    cafe_a = raw_place("cafe-a", reviews=900, rating=4.6, price_level=2)
    cafe_b = raw_place("cafe-b", reviews=300, rating=4.2, price_level=2)
    cafe_c = raw_place("cafe-c", reviews=50, rating=3.9, price_level=3, types=("bakery",))
    closed = raw_place("cafe-closed", reviews=5000, rating=4.9, price_level=1, business_status="CLOSED_PERMANENTLY")
    gym = raw_place("gym-1", reviews=120, rating=4.4, types=("gym",))
    bar = raw_place("bar-1", reviews=400, rating=4.1, types=("bar",))

    google_api.nearby = {
        (800, None, None): [cafe_a, cafe_b, closed, gym, bar],
        (800, "cafe", None): [cafe_a, cafe_b, closed],
        (800, None, "cafeteria"): [cafe_a],
        (1500, "cafe", None): [cafe_a, cafe_b, closed],
        (1500, "bakery", None): [cafe_c],
        (1500, None, "cafeteria"): [cafe_a, cafe_c],
    }
    google_api.details = {
        "cafe-a": cafe_a,
        "cafe-b": cafe_b,
    }
    return google_api


def _disabled_llm_client() -> LLMClient:
    client = LLMClient()
    client.api_key = None
    return client


def make_client(google_api: FakeGoogleAPI) -> TestClient:
    """FastAPI test client wired to a fake Google API, no insight provider and fresh stores"""
    app = create_app()
    cache = TTLCache()
    report_store = ReportStore()

    app.dependency_overrides[get_places_client] = lambda: PlacesClient(
        api_key="test-key",
        base_url="https://maps.test/api",
        transport=google_api.transport(),
    )
    app.dependency_overrides[get_llm_client] = _disabled_llm_client
    app.dependency_overrides[get_result_cache] = lambda: cache
    app.dependency_overrides[get_report_store] = lambda: report_store
    return TestClient(app)


@pytest.fixture
def client(cafe_google_api: FakeGoogleAPI) -> TestClient:
    """Create FastAPI test client over the cafe neighbourhood"""
    return make_client(cafe_google_api)
