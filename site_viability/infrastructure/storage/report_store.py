"""In-process report store keyed by request id"""

import logging
import threading
from typing import Dict, Optional

from site_viability.domain.models import AnalysisResponse

logger = logging.getLogger(__name__)


class ReportStore:
    """Write-once, read-many store of analysis responses"""

    def __init__(self):
        self._reports: Dict[str, AnalysisResponse] = {}
        self._lock = threading.Lock()

    def save(self, response: AnalysisResponse) -> bool:
        """Store a response; returns False (keeping the first write) if the id already exists"""
        with self._lock:
            if response.request_id in self._reports:
                logger.warning("Report already stored", extra={"request_id": response.request_id})
                return False
            self._reports[response.request_id] = response
            return True

    def get(self, request_id: str) -> Optional[AnalysisResponse]:
        with self._lock:
            return self._reports.get(request_id)
