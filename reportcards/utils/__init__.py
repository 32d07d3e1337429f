"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging, report_logger, ReportCardFormatter
from .exceptions import (
    ReportCardError,
    RecommendationTableError,
    CaptureError,
    ExportError,
    StoreError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "report_logger",
    "ReportCardFormatter",
    "ReportCardError",
    "RecommendationTableError",
    "CaptureError",
    "ExportError",
    "StoreError",
]
