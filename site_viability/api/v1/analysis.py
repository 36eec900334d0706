"""POST /v1/analyze - site viability analysis endpoint"""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Request

from site_viability.api.dependencies import get_orchestrator, get_request_id
from site_viability.api.v1.schemas import AnalyzeRequest, AnalyzeResponse
from site_viability.domain.exceptions import (
    AddressNotFoundError,
    RateLimitedError,
    UpstreamError,
    UpstreamTimeoutError,
)
from site_viability.infrastructure.observability.logging import log_analysis
from site_viability.infrastructure.observability.metrics import record_analysis, record_phase_timings
from site_viability.services.analysis import AnalysisOrchestrator

router = APIRouter()


def _error(status_code: int, error_code: str, message: str, **details) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"error_code": error_code, "message": message, "details": details},
    )


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_site(
    request_body: AnalyzeRequest,
    request: Request,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
):
    """
    Produce a viability score, verdict and insights for a proposed location.

    Error mapping:
    - 400 ADDRESS_NOT_FOUND: address could not be resolved
    - 429 RATE_LIMIT: provider quota exhausted (retryable by the caller)
    - 504 TIMEOUT: an upstream call exceeded its deadline
    - 502 PLACES_UPSTREAM_ERROR: any other upstream failure
    """
    trace_id = get_request_id(request)

    try:
        result = await orchestrator.analyze(
            address=request_body.address,
            business_category=request_body.business_category,
            avg_ticket=request_body.avg_ticket,
            country_bias=request_body.country_bias,
            place_id=request_body.place_id,
        )

    except AddressNotFoundError as e:
        logging.warning(f"Address not found: {e}", extra={"request_id": trace_id})
        raise _error(400, "ADDRESS_NOT_FOUND", str(e))

    except RateLimitedError as e:
        logging.warning(f"Upstream rate limit: {e}", extra={"request_id": trace_id})
        raise _error(429, "RATE_LIMIT", str(e), upstream=e.upstream)

    except UpstreamTimeoutError as e:
        logging.error(f"Upstream timeout: {e}", extra={"request_id": trace_id})
        raise _error(504, "TIMEOUT", str(e), upstream=e.upstream, timeout_seconds=e.timeout_seconds)

    except UpstreamError as e:
        logging.error(f"Upstream error: {e}", extra={"request_id": trace_id})
        raise _error(502, "PLACES_UPSTREAM_ERROR", str(e), upstream=e.upstream, status=e.status, detail=e.detail)

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": trace_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    # Record metrics and logs
    timings = asdict(result.timing_ms)
    record_analysis(result.verdict.value)
    if not result.cache_hit:
        record_phase_timings(timings)
    log_analysis(
        result.request_id,
        result.input.business_category.value,
        result.viability_score,
        result.verdict.value,
        result.cache_hit,
        timings,
    )

    return AnalyzeResponse.model_validate(result)
