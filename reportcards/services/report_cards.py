"""
Report Card Service - Ties the store, renderer and exporter together
"""
from typing import Any, Optional, Tuple

from reportcards.core.recommendations import RecommendationResolver, Resolution
from reportcards.core.reports import (
    ReportCardRenderer, ReportCardExporter, RenderPass, ExportResult,
    PlaywrightCapturer, RegionCapturer,
)
from reportcards.models import ReportRecord
from reportcards.services.report_store import ReportStore
from reportcards.utils import get_logger, report_logger, StoreError

logger = get_logger(__name__)


class ReportCardService:
    """
    The report list view.

    Cards are mounted by ``render``. While mounted, every store change
    triggers a full re-render so no derived data outlives the records it
    came from.
    """

    def __init__(
        self,
        store: ReportStore,
        renderer: ReportCardRenderer,
        exporter: ReportCardExporter,
    ):
        self.store = store
        self.renderer = renderer
        self.exporter = exporter
        self._current: Optional[RenderPass] = None
        self._unsubscribe = store.subscribe(self._on_store_change)

    @classmethod
    def from_settings(
        cls,
        settings,
        store: Optional[ReportStore] = None,
        capturer: Optional[RegionCapturer] = None,
    ) -> "ReportCardService":
        resolver = RecommendationResolver.from_settings(settings)
        return cls(
            store=store or ReportStore(),
            renderer=ReportCardRenderer.from_settings(resolver, settings),
            exporter=ReportCardExporter.from_settings(
                capturer or PlaywrightCapturer.from_settings(settings), settings
            ),
        )

    @property
    def resolver(self) -> RecommendationResolver:
        return self.renderer.resolver

    @property
    def current_pass(self) -> Optional[RenderPass]:
        return self._current

    @property
    def is_mounted(self) -> bool:
        return self._current is not None

    def render(self) -> RenderPass:
        """Render the whole list and make it the mounted pass."""
        self._current = self.renderer.render_list(self.store.list())
        return self._current

    def unmount(self) -> None:
        self._current = None

    def close(self) -> None:
        self.unmount()
        self._unsubscribe()

    def _on_store_change(self, records: Tuple[ReportRecord, ...]) -> None:
        if self.is_mounted:
            logger.debug(f"Store changed ({len(records)} reports), re-rendering")
            self.render()

    def get_record(self, record_id: Any) -> ReportRecord:
        record = self.store.get(record_id)
        if record is None:
            raise StoreError(f"Report {record_id} not found", record_id=str(record_id))
        return record

    def resolve(self, record_id: Any) -> Tuple[ReportRecord, Resolution]:
        record = self.get_record(record_id)
        return record, self.resolver.resolve(record.diagnosis, record.confidence)

    async def export(self, record_id: Any) -> Optional[ExportResult]:
        """
        Export one card from the mounted pass.

        The pass is taken when the export starts; a re-render while the
        capture is in flight does not affect it.
        """
        record = self.get_record(record_id)
        render_pass = self._current
        if render_pass is None:
            report_logger(logger, record.key).warning("Export skipped: report list is not mounted")
            return None
        return await self.exporter.export(record, render_pass)
