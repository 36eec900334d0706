"""GET /v1/report/{request_id} - Fetch a stored analysis"""

from fastapi import APIRouter, Depends, HTTPException

from site_viability.api.dependencies import get_report_store
from site_viability.api.v1.schemas import AnalyzeResponse
from site_viability.infrastructure.storage.report_store import ReportStore

router = APIRouter()


@router.get("/report/{request_id}", response_model=AnalyzeResponse)
def get_report(request_id: str, report_store: ReportStore = Depends(get_report_store)):
    """
    Retrieve a previously generated analysis by its request id.

    Returns:
        The stored analysis, including cache-hit replays
    """
    report = report_store.get(request_id)

    if report is None:
        raise HTTPException(
            status_code=404,
            detail={
                "error_code": "REPORT_NOT_FOUND",
                "message": "No report exists for the given request id",
                "details": {"request_id": request_id},
            },
        )

    return AnalyzeResponse.model_validate(report)
