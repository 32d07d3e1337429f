"""
Unit Tests for the Report Store and Card Service
"""
import asyncio

import pytest

from reportcards.core.reports import ReportCardExporter
from reportcards.models import ReportRecord
from reportcards.services import ReportStore, ReportCardService
from reportcards.utils import StoreError


class TestReportStore:
    """Tests for ReportStore."""

    def test_list_preserves_order(self, sample_records):
        store = ReportStore(sample_records)
        assert store.list() == tuple(sample_records)
        assert len(store) == 3

    def test_get_matches_string_and_int_ids(self, sample_records):
        store = ReportStore(sample_records)
        assert store.get(1) is sample_records[0]
        assert store.get("1") is sample_records[0]
        assert store.get("missing") is None

    def test_add_rejects_duplicates(self, sample_records):
        store = ReportStore(sample_records)
        with pytest.raises(StoreError):
            store.add(ReportRecord(id="1", patientName="Dup"))

    def test_remove_unknown_raises(self):
        with pytest.raises(StoreError) as exc_info:
            ReportStore().remove(42)
        assert exc_info.value.record_id == "42"

    def test_subscribers_receive_snapshots(self, sample_records):
        store = ReportStore()
        seen = []
        unsubscribe = store.subscribe(seen.append)

        store.add(sample_records[0])
        store.remove(1)
        unsubscribe()
        store.add(sample_records[1])

        assert seen == [(sample_records[0],), ()]

    def test_replace_all_swaps_list_and_notifies(self, sample_records):
        store = ReportStore(sample_records[:1])
        seen = []
        store.subscribe(seen.append)

        store.replace_all(sample_records[1:])

        assert store.list() == tuple(sample_records[1:])
        assert seen == [tuple(sample_records[1:])]
        assert store.get(1) is None

    def test_get_prefers_last_duplicate(self):
        store = ReportStore()
        store.replace_all([ReportRecord(id=5, patientName="First"), ReportRecord(id="5", patientName="Second")])
        assert store.get(5).patient_name == "Second"


class TestReportCardService:
    """Tests for ReportCardService."""

    def test_not_mounted_until_rendered(self, service):
        assert not service.is_mounted
        render_pass = service.render()
        assert service.is_mounted
        assert service.current_pass is render_pass

    def test_store_change_rerenders_when_mounted(self, service):
        first = service.render()
        service.store.add(ReportRecord(id=4, diagnosis="notumour", confidence=0.9, patientName="New"))

        assert service.current_pass is not first
        assert len(service.current_pass.cards) == 4

    def test_store_change_ignored_when_unmounted(self, service):
        service.store.add(ReportRecord(id=4, patientName="New"))
        assert service.current_pass is None

    def test_replace_all_rerenders_with_last_duplicate_winning(self, service):
        service.render()
        service.store.replace_all([
            ReportRecord(id=5, patientName="First"),
            ReportRecord(id=6, patientName="Other"),
            ReportRecord(id=5, patientName="Second"),
        ])

        render_pass = service.current_pass
        assert len(render_pass.cards) == 3
        assert render_pass.region_for(5) == "#report-region-2"
        assert render_pass.region_for(1) is None

    def test_resolve(self, service):
        record, resolution = service.resolve(1)
        assert record.patient_name == "Jane Doe"
        assert resolution.diagnosis_text == "Glioma"

    def test_resolve_unknown_raises(self, service):
        with pytest.raises(StoreError):
            service.resolve("nope")

    async def test_export_before_render_is_noop(self, service, fake_capturer):
        assert await service.export(1) is None
        assert fake_capturer.calls == []

    async def test_export_after_render(self, service):
        service.render()
        result = await service.export("r-2")
        assert result.filename == "John Roe_Medical_Report.pdf"

    async def test_removed_record_is_unknown(self, service):
        service.render()
        service.store.remove(3)
        with pytest.raises(StoreError):
            await service.export(3)

    async def test_export_survives_rerender_in_flight(
        self, renderer, capturer_factory, sample_records, temp_output_dir
    ):
        capturer = capturer_factory(delay=0.05)
        service = ReportCardService(
            store=ReportStore(sample_records),
            renderer=renderer,
            exporter=ReportCardExporter(capturer, output_dir=temp_output_dir),
        )
        service.render()

        export_task = asyncio.create_task(service.export(3))
        await asyncio.sleep(0)
        service.store.remove(1)

        result = await export_task
        assert result is not None
        assert capturer.calls == [("#report-region-2", "3")]
        assert service.current_pass.region_for(3) == "#report-region-1"

    def test_close_unsubscribes(self, service):
        service.render()
        service.close()
        service.store.add(ReportRecord(id=9, patientName="Late"))
        assert service.current_pass is None
