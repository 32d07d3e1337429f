"""
Report Card Module

Renders report cards as HTML and exports single cards as PDF snapshots.
"""
from .card_renderer import ReportCardRenderer, RenderPass, CardView, CardImage
from .capture import RegionCapturer, PlaywrightCapturer
from .exporter import (
    ReportCardExporter,
    ExportResult,
    DocumentPlacement,
    build_document,
    compute_placement,
    disk_filename,
    export_filename,
    sanitize_filename,
)

__all__ = [
    "ReportCardRenderer",
    "RenderPass",
    "CardView",
    "CardImage",
    "RegionCapturer",
    "PlaywrightCapturer",
    "ReportCardExporter",
    "ExportResult",
    "DocumentPlacement",
    "build_document",
    "compute_placement",
    "disk_filename",
    "export_filename",
    "sanitize_filename",
]
