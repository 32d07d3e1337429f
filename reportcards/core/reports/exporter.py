"""
Report Card Exporter

Turns one mounted card into a single-page A4 PDF:
capture the region at 2x, embed the raster at (10mm, 10mm) with a fixed
190mm width and proportional height, then save it.
"""
from dataclasses import dataclass
from typing import Optional, Tuple
from datetime import datetime
import asyncio
import io
import os
import re

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from reportcards.core.reports.capture import RegionCapturer
from reportcards.core.reports.card_renderer import RenderPass
from reportcards.models import ReportRecord
from reportcards.utils import get_logger, report_logger, ExportError

logger = get_logger(__name__)

FILENAME_SUFFIX = "_Medical_Report.pdf"
DOCUMENT_MARGIN_MM = 10.0
DOCUMENT_IMAGE_WIDTH_MM = 190.0

# Bytes, well under the 255-byte name limit of common filesystems
MAX_DISK_NAME_BYTES = 200

DEFAULT_OUTPUT_DIR = "reports"

# Path separators, Windows-reserved characters and control characters
_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f\x7f]')


@dataclass(frozen=True)
class DocumentPlacement:
    """Image position on the page in millimetres from the top-left corner."""
    x_mm: float
    y_mm: float
    width_mm: float
    height_mm: float


@dataclass(frozen=True)
class ExportResult:
    """A finished export."""
    record_id: str
    filename: str
    path: str
    content: bytes
    raster_size: Tuple[int, int]
    placement: DocumentPlacement
    generated_at: datetime


def compute_placement(
    raster_width: int,
    raster_height: int,
    margin_mm: float = DOCUMENT_MARGIN_MM,
    width_mm: float = DOCUMENT_IMAGE_WIDTH_MM,
) -> DocumentPlacement:
    """
    Fixed width, height from the raster aspect ratio.

    The image is neither clipped nor paginated when it overflows the page.
    """
    if raster_width <= 0 or raster_height <= 0:
        raise ValueError(f"Invalid raster size {raster_width}x{raster_height}")
    return DocumentPlacement(
        x_mm=margin_mm,
        y_mm=margin_mm,
        width_mm=width_mm,
        height_mm=raster_height * width_mm / raster_width,
    )


def sanitize_filename(name: str, replacement: str = "_") -> str:
    """Replace characters that are unsafe in a file name."""
    cleaned = _UNSAFE_FILENAME_CHARS.sub(replacement, name).strip()
    if cleaned in ("", ".", ".."):
        return replacement
    return cleaned


def export_filename(patient_name: str, sanitize: bool = False) -> str:
    """Download name for a report; the patient name is verbatim unless ``sanitize``."""
    name = sanitize_filename(patient_name) if sanitize else patient_name
    return f"{name}{FILENAME_SUFFIX}"


def disk_filename(record_key: str, filename: str, max_bytes: int = MAX_DISK_NAME_BYTES) -> str:
    """
    Name of the saved copy: ``{key}-{filename}``, sanitized.

    The stem is cut on a UTF-8 character boundary so the encoded name fits
    in ``max_bytes``; the ``.pdf`` extension is always kept.
    """
    name = f"{sanitize_filename(record_key)}-{sanitize_filename(filename)}"
    stem, ext = os.path.splitext(name)
    budget = max_bytes - len(ext.encode("utf-8"))
    encoded = stem.encode("utf-8")
    if len(encoded) > budget:
        stem = encoded[:budget].decode("utf-8", errors="ignore")
    return f"{stem}{ext}"


def build_document(
    png: bytes,
    title: str = "Medical Report",
    margin_mm: float = DOCUMENT_MARGIN_MM,
    width_mm: float = DOCUMENT_IMAGE_WIDTH_MM,
    compress: bool = True,
) -> Tuple[bytes, Tuple[int, int], DocumentPlacement]:
    """
    Serialize a PNG raster into a one-page A4 portrait PDF.

    Args:
        compress: Deflate the page content stream. Turn off to get a
            readable stream, e.g. to inspect the drawing operators.

    Returns:
        (pdf bytes, raster (width, height), placement)
    """
    image = ImageReader(io.BytesIO(png))
    raster_width, raster_height = image.getSize()
    placement = compute_placement(raster_width, raster_height, margin_mm, width_mm)

    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4, pageCompression=1 if compress else 0)
    pdf.setTitle(title)

    # reportlab measures y from the bottom edge
    _, page_height = A4
    pdf.drawImage(
        image,
        placement.x_mm * mm,
        page_height - (placement.y_mm + placement.height_mm) * mm,
        width=placement.width_mm * mm,
        height=placement.height_mm * mm,
    )
    pdf.showPage()
    pdf.save()

    return buffer.getvalue(), (raster_width, raster_height), placement


class ReportCardExporter:
    """
    Exports mounted report cards as PDF snapshots.

    Stateless between calls, so several exports may run concurrently.
    """

    def __init__(
        self,
        capturer: RegionCapturer,
        output_dir: str = DEFAULT_OUTPUT_DIR,
        sanitize_filenames: bool = False,
        margin_mm: float = DOCUMENT_MARGIN_MM,
        image_width_mm: float = DOCUMENT_IMAGE_WIDTH_MM,
    ):
        self.capturer = capturer
        self.output_dir = output_dir
        self.sanitize_filenames = sanitize_filenames
        self.margin_mm = margin_mm
        self.image_width_mm = image_width_mm
        os.makedirs(output_dir, exist_ok=True)

        logger.info(f"ReportCardExporter initialized, output: {output_dir}")

    @classmethod
    def from_settings(cls, capturer: RegionCapturer, settings) -> "ReportCardExporter":
        return cls(
            capturer=capturer,
            output_dir=settings.reports_dir,
            sanitize_filenames=settings.sanitize_filenames,
            margin_mm=settings.document_margin_mm,
            image_width_mm=settings.document_image_width_mm,
        )

    async def export(self, record: ReportRecord, render_pass: RenderPass) -> Optional[ExportResult]:
        """
        Export the card of ``record`` from ``render_pass``.

        Returns None without raising when the card is not mounted in the pass.
        Capture and serialization failures raise CaptureError / ExportError.
        """
        log = report_logger(logger, record.key)
        selector = render_pass.region_for(record.id)
        if selector is None:
            log.warning("Export skipped: card is not mounted")
            return None

        png = await self.capturer.capture(render_pass.html, selector, record_id=record.key)

        filename = export_filename(record.patient_name, sanitize=self.sanitize_filenames)
        try:
            content, raster_size, placement = await asyncio.to_thread(
                build_document,
                png,
                f"{record.patient_name} Medical Report",
                self.margin_mm,
                self.image_width_mm,
            )
        except Exception as e:
            log.error(f"Document generation failed: {e}")
            raise ExportError(f"Document generation failed: {e}", record_id=record.key) from e

        path = self._save(record, filename, content)
        log.info(f"Exported as {filename} ({raster_size[0]}x{raster_size[1]} px)")

        return ExportResult(
            record_id=record.key,
            filename=filename,
            path=path,
            content=content,
            raster_size=raster_size,
            placement=placement,
            generated_at=datetime.now(),
        )

    def _save(self, record: ReportRecord, filename: str, content: bytes) -> str:
        # Sanitized and keyed by record so it stays inside output_dir
        filepath = os.path.join(self.output_dir, disk_filename(record.key, filename))
        try:
            with open(filepath, "wb") as f:
                f.write(content)
        except OSError as e:
            raise ExportError(f"Could not save report: {e}", record_id=record.key) from e
        return filepath
