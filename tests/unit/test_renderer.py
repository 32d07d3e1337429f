"""
Unit Tests for Report Card Rendering
"""
import pytest

from reportcards.core.reports import ReportCardRenderer, RenderPass
from reportcards.core.reports.card_renderer import EMPTY_MESSAGE, embed_image
from reportcards.models import ReportRecord


class TestRenderList:
    """Tests for ReportCardRenderer.render_list."""

    def test_empty_list_renders_single_placeholder(self, renderer):
        render_pass = renderer.render_list([])

        assert isinstance(render_pass, RenderPass)
        assert render_pass.is_empty
        assert render_pass.html.count(EMPTY_MESSAGE) == 1
        assert "data-report-id=" not in render_pass.html
        assert dict(render_pass.regions) == {}

    def test_one_card_per_record_in_order(self, renderer, sample_records):
        render_pass = renderer.render_list(sample_records)

        assert len(render_pass.cards) == 3
        assert render_pass.html.count("data-report-id=") == 3
        assert EMPTY_MESSAGE not in render_pass.html

        positions = [render_pass.html.index(r.patient_name) for r in sample_records]
        assert positions == sorted(positions)
        assert [c.record for c in render_pass.cards] == list(sample_records)

    def test_regions_keyed_by_string_id(self, renderer, sample_records):
        render_pass = renderer.render_list(sample_records)

        assert set(render_pass.regions) == {"1", "r-2", "3"}
        assert render_pass.region_for(1) == "#report-region-0"
        assert render_pass.region_for("1") == "#report-region-0"
        assert render_pass.region_for("r-2") == "#report-region-1"
        assert render_pass.region_for(99) is None
        for selector in render_pass.regions.values():
            assert f'id="{selector[1:]}"' in render_pass.html

    def test_regions_are_read_only(self, renderer, sample_records):
        render_pass = renderer.render_list(sample_records)
        with pytest.raises(TypeError):
            render_pass.regions["new"] = "#x"

    def test_each_pass_has_its_own_regions(self, renderer, sample_records):
        first = renderer.render_list(sample_records)
        second = renderer.render_list(sample_records[:1])

        assert first.region_for(3) == "#report-region-2"
        assert second.region_for(3) is None

    def test_duplicate_ids_last_card_wins(self, renderer):
        records = [
            ReportRecord(id=7, diagnosis="glioma", confidence=0.9, patientName="First"),
            ReportRecord(id="7", diagnosis="glioma", confidence=0.9, patientName="Second"),
        ]
        render_pass = renderer.render_list(records)

        assert len(render_pass.cards) == 2
        assert render_pass.region_for(7) == "#report-region-1"


class TestCardContent:
    """Tests for the fields rendered on each card."""

    def test_header_fields_and_footer(self, renderer, sample_records):
        html = renderer.render_list(sample_records[:1]).html

        assert "Evergreen Wellness Hospital" in html
        assert "Medical Report" in html
        assert "Dr. Patel" in html
        assert "2024-03-02" in html
        assert "Jane Doe" in html
        assert "54" in html
        assert "(123) 456-7890" in html
        assert "Download Report (PDF)" in html

    def test_findings_block(self, renderer, sample_records):
        html = renderer.render_list(sample_records[:1]).html

        assert "<strong>Diagnosis:</strong> Glioma" in html
        assert "<strong>Probability:</strong> 0.87" in html
        assert "Surgery, radiation therapy, and chemotherapy." in html
        assert "Neurosurgeon, Oncologist" in html

    def test_unknown_diagnosis_shows_fallback(self, renderer, sample_records):
        html = renderer.render_list(sample_records[1:2]).html

        assert "<strong>Diagnosis:</strong> Astrocytoma" in html
        assert "<strong>Prevention:</strong> N/A" in html
        assert "<strong>Treatment:</strong> N/A" in html
        assert "<strong>Specialist:</strong> N/A" in html

    def test_missing_confidence_renders_low_confidence(self, renderer, sample_records):
        html = renderer.render_list(sample_records[2:]).html

        assert "<strong>Diagnosis:</strong> No significant abnormality detected" in html
        assert "<strong>Probability:</strong> 0.00" in html
        assert "Consult an Endocrinologist only if symptoms develop." in html

    def test_only_present_images_are_rendered(self, renderer, sample_records, png_payload):
        render_pass = renderer.render_list(sample_records)
        first, second, _ = render_pass.cards

        assert [i.alt for i in first.images] == ["Medical Scan", "Grad-CAM Heatmap"]
        assert second.images == ()
        assert render_pass.html.count("<img") == 2
        assert f"data:image/png;base64,{png_payload}" in render_pass.html
        assert "YOLO Detection" not in render_pass.html

    def test_export_action_per_card(self, renderer, sample_records):
        render_pass = renderer.render_list(sample_records)

        assert [c.export_url for c in render_pass.cards] == [
            "/api/v1/reports/1/export",
            "/api/v1/reports/r-2/export",
            "/api/v1/reports/3/export",
        ]

    def test_text_is_escaped(self, renderer):
        record = ReportRecord(id=1, diagnosis="<b>glioma</b>", confidence=0.9, patientName="<script>x</script>")
        html = renderer.render_list([record]).html

        assert "<script>x</script>" not in html
        assert "&lt;script&gt;" in html

    def test_custom_branding(self, resolver):
        renderer = ReportCardRenderer(resolver, hospital_name="Riverside Clinic", footer_contact="Call 555-0100")
        html = renderer.render_list([ReportRecord(id=1, patientName="A")]).html

        assert "Riverside Clinic" in html
        assert "Call 555-0100" in html


def test_embed_image():
    assert embed_image(None) is None
    assert embed_image("") is None
    assert embed_image("abc") == "data:image/png;base64,abc"
