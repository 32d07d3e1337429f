"""
Service layer.
"""
from .report_store import ReportStore
from .report_cards import ReportCardService

__all__ = [
    "ReportStore",
    "ReportCardService",
]
