"""
Pytest Configuration and Fixtures

Shared fixtures for report card tests. Region capture is replaced by an
in-process fake so no browser is needed.
"""
import asyncio
import base64
import io
import os
import sys
import tempfile
from pathlib import Path

import pytest
from PIL import Image

# Keep exports from the module-level app out of the working tree
os.environ.setdefault("REPORTS_DIR", str(Path(tempfile.gettempdir()) / "reportcards-test-reports"))

sys.path.insert(0, str(Path(__file__).parent.parent))

from reportcards.core.recommendations import RecommendationResolver
from reportcards.core.reports import ReportCardRenderer, ReportCardExporter, RegionCapturer
from reportcards.models import ReportRecord
from reportcards.services import ReportStore, ReportCardService
from reportcards.utils import CaptureError


def make_png(width: int = 400, height: int = 500, color=(255, 255, 255)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeCapturer(RegionCapturer):
    """Returns a blank PNG of a fixed size and records every call."""

    def __init__(self, size=(400, 500), fail: bool = False, delay: float = 0.0):
        self.size = size
        self.fail = fail
        self.delay = delay
        self.calls = []

    async def capture(self, html: str, selector: str, record_id: str = "unknown") -> bytes:
        self.calls.append((selector, record_id))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise CaptureError("Simulated rasterization failure", record_id=record_id)
        return make_png(*self.size)


@pytest.fixture
def png_payload() -> str:
    """Small base64 PNG, as the store supplies images."""
    return base64.b64encode(make_png(4, 4, (200, 30, 30))).decode("ascii")


@pytest.fixture
def resolver() -> RecommendationResolver:
    return RecommendationResolver()


@pytest.fixture
def renderer(resolver) -> ReportCardRenderer:
    return ReportCardRenderer(resolver)


@pytest.fixture
def temp_output_dir():
    """Create temporary output directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def fake_capturer() -> FakeCapturer:
    return FakeCapturer()


@pytest.fixture
def exporter(fake_capturer, temp_output_dir) -> ReportCardExporter:
    return ReportCardExporter(capturer=fake_capturer, output_dir=temp_output_dir)


@pytest.fixture
def sample_records(png_payload):
    """Three records covering known, unknown and low-confidence diagnoses."""
    return [
        ReportRecord(
            id=1,
            diagnosis="Glioma",
            confidence="0.87",
            patientName="Jane Doe",
            age=54,
            sex="F",
            doctor="Dr. Patel",
            date="2024-03-02",
            imageUrl=png_payload,
            gradcamUrl=png_payload,
        ),
        ReportRecord(
            id="r-2",
            diagnosis="Astrocytoma",
            confidence=0.6,
            patientName="John Roe",
            age="41",
            sex="M",
        ),
        ReportRecord(
            id=3,
            diagnosis="pituitary",
            confidence=None,
            patientName="Ana Lima",
        ),
    ]


@pytest.fixture
def service(renderer, exporter, sample_records) -> ReportCardService:
    return ReportCardService(
        store=ReportStore(sample_records),
        renderer=renderer,
        exporter=exporter,
    )


@pytest.fixture
def capturer_factory():
    """Build a FakeCapturer with custom size, delay or failure."""
    return FakeCapturer


@pytest.fixture
def png_factory():
    """Build PNG bytes of a given size."""
    return make_png
