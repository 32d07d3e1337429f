"""
Custom Exception Hierarchy

Provides specific exception types for the report card pipeline
with structured error information.
"""
from typing import Optional, Dict, Any


class ReportCardError(Exception):
    """Base exception for all report card errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class RecommendationTableError(ReportCardError):
    """Malformed or unreadable condition table."""

    def __init__(
        self,
        message: str,
        source: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="TABLE_ERROR",
            details={"source": source, **(details or {})}
        )
        self.source = source


class CaptureError(ReportCardError):
    """Errors while rasterizing a rendered card region."""

    def __init__(
        self,
        message: str,
        record_id: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="CAPTURE_ERROR",
            details={"record_id": record_id, **(details or {})}
        )
        self.record_id = record_id


class ExportError(ReportCardError):
    """Errors while serializing or saving the exported document."""

    def __init__(
        self,
        message: str,
        record_id: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="EXPORT_ERROR",
            details={"record_id": record_id, **(details or {})}
        )
        self.record_id = record_id


class StoreError(ReportCardError):
    """Errors raised by the report store."""

    def __init__(
        self,
        message: str,
        record_id: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="STORE_ERROR",
            details={"record_id": record_id, **(details or {})}
        )
        self.record_id = record_id
