"""
API and record models.
"""
from .report import ReportRecord, RecommendationResponse, ReportListResponse, HealthResponse

__all__ = [
    "ReportRecord",
    "RecommendationResponse",
    "ReportListResponse",
    "HealthResponse",
]
