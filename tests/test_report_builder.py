"""
Unit tests for report document assembly, rendering orchestration and the
JSON document writer
"""

import base64
import json
import sys
from datetime import datetime
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from core.grid import PotentialGrid
from core.interfaces import ChartCapture, StaticChartCapture
from core.report_builder import (
    COMMENTS_PLACEHOLDER,
    GRADIENT_TABLE_LIMIT,
    UNCERTAIN_TABLE_LIMIT,
    ReportBuilder,
    build_report_document,
    truncation_note,
)
from core.report_document import (
    IMAGE_NOT_AVAILABLE,
    ImagePlaceholder,
    MetricTriplet,
    TableBlock,
    TextBlock,
)
from core.schemas import AttachedPhoto, InspectionInfo, SurveyParameters
from core.state_container import analyze_survey
from tools.report.render_report import capture_images, render_report
from utils.json_writer import JsonDocumentWriter

GENERATED_AT = datetime(2024, 5, 17, 14, 30)

BASE_SECTIONS = [
    "header",
    "executive_summary",
    "risk_table",
    "recommendations",
    "potential_map_2d",
    "potential_surface_3d",
    "gradient_map",
    "gradient_methodology",
    "gradient_points",
    "uncertain_points",
    "comments",
    "signature",
    "footer",
]


def tables(section):
    return [b for b in section.blocks if isinstance(b, TableBlock)]


def texts(section):
    return [b for b in section.blocks if isinstance(b, TextBlock)]


@pytest.fixture
def large_result():
    """4x5 survey entirely in the uncertain band: 20 uncertain points, 12 gradients."""
    matrix = np.linspace(-0.34, -0.21, 20).reshape(4, 5).tolist()
    grid = PotentialGrid.from_lists([0, 0.2, 0.4, 0.6, 0.8], [0.6, 0.4, 0.2, 0.0], matrix)
    return analyze_survey(grid, SurveyParameters())


@pytest.fixture
def small_result():
    grid = PotentialGrid.from_lists([0, 1], [1, 0], [[-0.40, -0.10], [-0.05, -0.02]])
    return analyze_survey(grid, SurveyParameters())


class TestSectionLayout:
    """Fixed section order"""

    def test_order_without_photos(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        assert document.section_keys() == BASE_SECTIONS

    def test_photos_section_before_signature(self, small_result):
        photos = [AttachedPhoto(id="p1", name="pier.jpg", description="North face")]
        document = build_report_document(small_result, photos=photos, generated_at=GENERATED_AT)

        keys = document.section_keys()
        assert keys.index("photos") == keys.index("comments") + 1
        assert keys.index("signature") == keys.index("photos") + 1
        assert tables(document.section("photos"))[0].rows == [["p1", "pier.jpg", "North face"]]

    def test_header(self, small_result):
        inspection = InspectionInfo(location="Viaduct V2", test_date="2024-05-16")
        document = build_report_document(small_result, inspection=inspection, generated_at=GENERATED_AT)

        assert document.title == "HALF-CELL POTENTIAL MAPPING REPORT"
        assert document.subtitle == "Reinforcement Corrosion Assessment - ASTM C876"
        assert document.generated_at == "2024-05-17T14:30"
        box = document.section("header").blocks[2]
        values = {item.label: item.value for item in box.items}
        assert values["Location"] == "Viaduct V2"
        assert values["Reference electrode"] == "CSE"

    def test_missing_section(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        with pytest.raises(KeyError, match="photos"):
            document.section("photos")

    def test_deterministic(self, small_result):
        doc1 = build_report_document(small_result, comments="ok", generated_at=GENERATED_AT)
        doc2 = build_report_document(small_result, comments="ok", generated_at=GENERATED_AT)
        assert doc1 == doc2

    def test_timestamp_is_required(self, small_result):
        with pytest.raises(TypeError):
            build_report_document(small_result)
        with pytest.raises(TypeError):
            ReportBuilder().build(small_result)

    def test_section_numbering(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        assert document.section("executive_summary").blocks[0].text.startswith("1. ")
        assert document.section("gradient_methodology").blocks[0].text.startswith("6.1 ")
        assert document.section("gradient_points").blocks[0].text.startswith("6.2 ")


class TestSummaryAndRisk:
    """Executive summary and risk table content"""

    def test_parameters_box(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        params_box = document.section("executive_summary").blocks[1]
        values = {item.label: item.value for item in params_box.items}
        assert values == {"Electrode": "CSE", "Cover": "30 mm", "Resistivity": "-"}

    @pytest.mark.parametrize("resistivity,text", [
        (75, "75 kΩ·cm"),
        (8.5, "8.5 kΩ·cm"),
        (55.1234567, "55.1234567 kΩ·cm"),
    ])
    def test_resistivity_printed_verbatim(self, resistivity, text):
        grid = PotentialGrid.from_lists([0, 1], [1, 0], [[-0.40, -0.10], [-0.05, -0.02]])
        result = analyze_survey(grid, SurveyParameters(resistivity_kohm_cm=resistivity))
        document = build_report_document(result, generated_at=GENERATED_AT)
        values = {item.label: item.value for item in document.section("executive_summary").blocks[1].items}
        assert values["Resistivity"] == text

    def test_interpretation_emphasised(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        block = texts(document.section("executive_summary"))[-1]
        assert block.style == "emphasis"
        assert block.text == small_result.interpretation

    def test_risk_table(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        table = tables(document.section("risk_table"))[0]

        assert [row[2] for row in table.rows] == ["1", "0", "3"]
        assert [row[3] for row in table.rows] == ["25.0%", "0.0%", "75.0%"]
        assert table.rows[0][1] == "< -350"
        assert table.rows[1][1] == "-350 to -200"
        assert table.row_colors == ["#E74C3C", "#F1C40F", "#2ECC71"]
        assert "CSE" in table.note

    def test_distribution_charts_follow_risk_table(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        placeholders = [b for b in document.section("risk_table").blocks if isinstance(b, ImagePlaceholder)]
        assert [p.identifier for p in placeholders] == ["potential_histogram", "risk_distribution_pie"]

    def test_image_identifiers(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        assert document.image_identifiers() == [
            "potential_histogram",
            "risk_distribution_pie",
            "potential_map_2d",
            "potential_surface_3d",
            "gradient_map",
        ]

    def test_placeholders_carry_fallback_text(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        surface = document.section("potential_surface_3d").blocks[1]
        assert surface.fallback_text == IMAGE_NOT_AVAILABLE
        assert "Isometric view" in surface.caption


class TestRecommendationsSection:
    """Recommendation blocks"""

    def test_one_block_per_recommendation(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        blocks = texts(document.section("recommendations"))

        assert [b.title for b in blocks] == [r.title for r in small_result.recommendations]
        assert blocks[0].tone == "urgent"
        assert blocks[0].reference == "ASTM C876-15, Section 6.2"

    def test_no_recommendations_placeholder(self):
        grid = PotentialGrid.from_lists([0, 1], [1, 0], [[-0.21, -0.19], [-0.19, -0.19]])
        result = analyze_survey(grid, SurveyParameters())
        assert result.recommendations == []

        document = build_report_document(result, generated_at=GENERATED_AT)
        blocks = texts(document.section("recommendations"))
        assert len(blocks) == 1
        assert blocks[0].style == "placeholder"


class TestGradientSections:
    """Gradient methodology and top-N table"""

    def test_metric_triplet(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        triplet = next(b for b in document.section("gradient_methodology").blocks if isinstance(b, MetricTriplet))
        values = [m.value for m in triplet.metrics]
        assert values == ["350 mV/m", "350 mV/m", "1"]

    def test_explanation_text(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        text = texts(document.section("gradient_methodology"))[0].text
        assert "Gradient = max(|ΔVx|/Δx, |ΔVy|/Δy) × 1000 [mV/m]" in text
        assert "> 150 mV/m" in text

    def test_top_n_with_truncation_note(self, large_result):
        assert len(large_result.gradients) == 12
        document = build_report_document(large_result, generated_at=GENERATED_AT)
        table = tables(document.section("gradient_points"))[0]

        assert table.total_rows == 12
        assert table.shown_rows == GRADIENT_TABLE_LIMIT
        assert len(table.rows) == GRADIENT_TABLE_LIMIT
        assert table.note == "... and 2 more points not shown"

        shown = [float(row[2]) for row in table.rows]
        assert shown == sorted(shown, reverse=True)

    def test_status_column(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        table = tables(document.section("gradient_points"))[0]
        assert table.columns == ["X (m)", "Y (m)", "Gradient (mV/m)", "Status"]
        assert table.rows == [["0.00", "1.00", "350.0", "critical"]]
        assert table.note is None

    def test_degenerate_grid_placeholder(self):
        grid = PotentialGrid.from_lists([0, 1, 2], [0], [[-0.1, -0.4, -0.3]])
        document = build_report_document(analyze_survey(grid, SurveyParameters()), generated_at=GENERATED_AT)

        assert tables(document.section("gradient_points")) == []
        assert texts(document.section("gradient_points"))[0].style == "placeholder"
        methodology = texts(document.section("gradient_methodology"))
        assert any("fewer than 2 rows" in b.text for b in methodology)


class TestUncertainSection:
    """First-N uncertain points"""

    def test_first_n_with_note(self, large_result):
        document = build_report_document(large_result, generated_at=GENERATED_AT)
        table = tables(document.section("uncertain_points"))[0]

        assert table.total_rows == 20
        assert len(table.rows) == UNCERTAIN_TABLE_LIMIT
        assert table.note == "... and 10 more points not shown"
        # scan order kept: first row is the top-left cell
        assert table.rows[0] == ["0.00", "0.60", "-340"]

    def test_empty_placeholder(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        section = document.section("uncertain_points")
        assert tables(section) == []
        assert texts(section)[0].style == "placeholder"

    def test_custom_limit(self, large_result):
        document = ReportBuilder(uncertain_table_limit=5).build(large_result, generated_at=GENERATED_AT)
        table = tables(document.section("uncertain_points"))[0]
        assert len(table.rows) == 5
        assert table.note == "... and 15 more points not shown"

    def test_truncation_note(self):
        assert truncation_note(10, 10, "points") is None
        assert truncation_note(11, 10, "points") == "... and 1 more points not shown"


class TestCommentsAndSignature:
    """Free text and responsibility blocks"""

    def test_comments_placeholder(self, small_result):
        document = build_report_document(small_result, comments="   ", generated_at=GENERATED_AT)
        block = texts(document.section("comments"))[0]
        assert block.text == COMMENTS_PLACEHOLDER
        assert block.style == "placeholder"

    def test_comments_text(self, small_result):
        document = build_report_document(small_result, comments="Spalling near joint J4.", generated_at=GENERATED_AT)
        assert texts(document.section("comments"))[0].text == "Spalling near joint J4."

    def test_signature(self, small_result):
        inspection = InspectionInfo(responsible_name="A. Souza", registration_number="CREA 12345")
        document = build_report_document(small_result, inspection=inspection, generated_at=GENERATED_AT)
        box = document.section("signature").blocks[1]
        values = {item.label: item.value for item in box.items}
        assert values["Name"] == "A. Souza"
        assert values["Registration"] == "CREA 12345"
        assert "Role" not in values

    def test_footer(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        assert "ASTM C876-15" in texts(document.section("footer"))[0].text


class FailingCapture(ChartCapture):
    def capture_chart(self, identifier):
        if identifier == "potential_surface_3d":
            raise RuntimeError("WebGL context lost")
        if identifier == "gradient_map":
            return None
        return b"\x89PNG" + identifier.encode()


class TestRenderReport:
    """Capture orchestration and JSON writer"""

    def test_failed_captures_recorded_as_missing(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        output = render_report(document, FailingCapture(), JsonDocumentWriter())
        payload = json.loads(output.decode("utf-8"))

        assert payload["missing_images"] == ["potential_surface_3d", "gradient_map"]
        assert set(payload["images"]) == {"potential_histogram", "risk_distribution_pie", "potential_map_2d"}
        assert base64.b64decode(payload["images"]["potential_map_2d"]) == b"\x89PNGpotential_map_2d"
        assert [s["key"] for s in payload["sections"]] == BASE_SECTIONS

    def test_no_capture(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        assert capture_images(document, None) == {}

        payload = json.loads(render_report(document, None, JsonDocumentWriter()))
        assert payload["missing_images"] == document.image_identifiers()

    def test_static_capture(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        images = capture_images(document, StaticChartCapture({"gradient_map": b"png"}))
        assert images == {"gradient_map": b"png"}

    def test_document_not_modified(self, small_result):
        document = build_report_document(small_result, generated_at=GENERATED_AT)
        before = document.to_dict()
        render_report(document, FailingCapture(), JsonDocumentWriter())
        assert document.to_dict() == before

    def test_writer_media_type(self):
        assert JsonDocumentWriter().media_type == "application/json"
