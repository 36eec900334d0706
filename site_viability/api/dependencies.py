"""Dependency injection for FastAPI endpoints"""

from functools import lru_cache

from fastapi import Depends, Request

from site_viability.infrastructure.clients.llm import LLMClient
from site_viability.infrastructure.clients.places import PlacesClient
from site_viability.infrastructure.storage.cache import TTLCache
from site_viability.infrastructure.storage.report_store import ReportStore
from site_viability.services.analysis import AnalysisOrchestrator
from site_viability.services.discovery import PlaceDiscovery
from site_viability.services.insights import InsightGenerator


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


@lru_cache
def get_result_cache() -> TTLCache:
    """Process-wide result cache"""
    return TTLCache()


@lru_cache
def get_report_store() -> ReportStore:
    """Process-wide report store"""
    return ReportStore()


def get_places_client() -> PlacesClient:
    """Provide Places API client instance"""
    return PlacesClient()


def get_llm_client() -> LLMClient:
    """Provide generation provider client instance"""
    return LLMClient()


def get_orchestrator(
    places_client: PlacesClient = Depends(get_places_client),
    llm_client: LLMClient = Depends(get_llm_client),
    cache: TTLCache = Depends(get_result_cache),
    report_store: ReportStore = Depends(get_report_store),
) -> AnalysisOrchestrator:
    """Wire the analysis pipeline for one request"""
    return AnalysisOrchestrator(
        discovery=PlaceDiscovery(places_client),
        insight_generator=InsightGenerator(llm_client),
        cache=cache,
        report_store=report_store,
    )
