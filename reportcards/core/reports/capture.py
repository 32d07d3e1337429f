"""
Region Capture

Rasterizes one rendered card region to PNG using headless Chromium.
"""
from abc import ABC, abstractmethod
from typing import Dict

from reportcards.utils import get_logger, report_logger, CaptureError

# Check for Playwright
try:
    from playwright.async_api import async_playwright
    PLAYWRIGHT_AVAILABLE = True
except ImportError:
    PLAYWRIGHT_AVAILABLE = False

logger = get_logger(__name__)

CAPTURE_SCALE = 2.0
VIEWPORT_WIDTH = 1024
VIEWPORT_HEIGHT = 768


class RegionCapturer(ABC):
    """Interface for anything that can turn a page region into PNG bytes."""

    @abstractmethod
    async def capture(self, html: str, selector: str, record_id: str = "unknown") -> bytes:
        """
        Rasterize the element matching ``selector`` in ``html``.

        Raises:
            CaptureError: The region is missing or rendering failed.
        """
        pass


class PlaywrightCapturer(RegionCapturer):
    """
    Captures a region with Playwright.

    Each call launches its own browser, so concurrent captures never share
    a page or context.
    """

    def __init__(
        self,
        scale: float = CAPTURE_SCALE,
        viewport_width: int = VIEWPORT_WIDTH,
        viewport_height: int = VIEWPORT_HEIGHT,
    ):
        self.scale = scale
        self.viewport: Dict[str, int] = {"width": viewport_width, "height": viewport_height}

    @classmethod
    def from_settings(cls, settings) -> "PlaywrightCapturer":
        return cls(
            scale=settings.capture_scale,
            viewport_width=settings.capture_viewport_width,
            viewport_height=settings.capture_viewport_height,
        )

    async def capture(self, html: str, selector: str, record_id: str = "unknown") -> bytes:
        log = report_logger(logger, record_id)
        if not PLAYWRIGHT_AVAILABLE:
            raise CaptureError("Playwright not available", record_id=record_id)

        try:
            async with async_playwright() as p:
                browser = await p.chromium.launch(headless=True)
                try:
                    context = await browser.new_context(
                        viewport=self.viewport,
                        device_scale_factor=self.scale,
                    )
                    page = await context.new_page()
                    await page.set_content(html, wait_until="load")

                    region = page.locator(selector)
                    if await region.count() == 0:
                        raise CaptureError(
                            f"Region {selector} not found in rendered page",
                            record_id=record_id,
                            details={"selector": selector}
                        )

                    png = await region.first.screenshot(type="png", animations="disabled")
                finally:
                    await browser.close()
        except CaptureError:
            raise
        except Exception as e:
            log.error(f"Capture failed: {e}")
            raise CaptureError(f"Rasterization failed: {e}", record_id=record_id) from e

        log.debug(f"Captured {selector} ({len(png)} bytes)")
        return png
