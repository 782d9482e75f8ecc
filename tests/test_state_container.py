"""
Unit tests for AssessmentContext (survey session state + analysis cache)
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

sys.path.insert(0, str(Path(__file__).parent.parent))

from core.grid import MalformedImportError, PotentialGrid
from core.schemas import AssessmentResult, AttachedPhoto, InspectionInfo
from core.state_container import (
    MAX_CACHED_ANALYSES,
    AssessmentContext,
    analyze_survey,
    get_global_context,
    reset_global_context,
)


@pytest.fixture
def context():
    grid = PotentialGrid.from_lists([0, 1], [1, 0], [[-0.40, -0.10], [-0.05, -0.02]])
    return AssessmentContext(grid=grid)


class TestSurveyEditing:
    """Edits replace the held values"""

    def test_starts_from_demonstration_survey(self):
        ctx = AssessmentContext()
        assert ctx.grid.shape == (15, 3)
        assert ctx.params.electrode == "CSE"
        assert ctx.comments == ""
        assert ctx.photos == []

    def test_update_cell(self, context):
        before = context.grid
        context.update_cell(1, 1, -0.50)
        assert context.grid.matrix[1][1] == -0.50
        assert before.matrix[1][1] == -0.02

    def test_update_cell_out_of_range_keeps_grid(self, context):
        before = context.grid
        with pytest.raises(IndexError):
            context.update_cell(5, 0, -0.1)
        assert context.grid is before

    def test_regenerate_grid(self, context):
        context.regenerate_grid([0.3, 0.0], [0.0, 0.5, 1.0])
        assert context.grid.x_vals == (0.0, 0.3)
        assert context.grid.y_vals == (1.0, 0.5, 0.0)
        assert all(v == 0.0 for row in context.grid.matrix for v in row)

    def test_set_electrode_resets_thresholds(self, context):
        context.update_parameters(severe_threshold_mV=-400.0)
        context.set_electrode("SCE")
        assert context.params.electrode == "SCE"
        assert context.params.severe_threshold_mV == -260.0
        assert context.params.low_threshold_mV == -110.0

    def test_update_parameters_merges(self, context):
        context.update_parameters(cover_depth_mm=80, resistivity_kohm_cm=12.5)
        assert context.params.cover_depth_mm == 80
        assert context.params.resistivity_kohm_cm == 12.5
        assert context.params.electrode == "CSE"

    def test_invalid_parameters_leave_state_untouched(self, context):
        before = context.params
        with pytest.raises(ValidationError):
            context.update_parameters(severe_threshold_mV=-100.0)
        assert context.params is before


class TestCSVRoundTrip:
    """Import replaces the grid only on success"""

    def test_import_replaces_grid(self, context):
        context.import_csv("Y/X;0;0,5;1\n1;-0,1;-0,2;-0,3\n0;-0,4;-0,5;-0,6\n")
        assert context.grid.shape == (2, 3)

    def test_failed_import_keeps_grid(self, context):
        before = context.grid
        with pytest.raises(MalformedImportError):
            context.import_csv("Y/X;0;1\n")
        assert context.grid is before

    def test_export_then_import(self, context):
        text = context.export_csv()
        other = AssessmentContext()
        other.import_csv(text)
        assert other.grid == context.grid


class TestAnalysis:
    """Derived results and caching"""

    def test_analyze(self, context):
        result = context.analyze()
        assert isinstance(result, AssessmentResult)
        assert result.statistics.severe.count == 1
        assert result.statistics.low.count == 3
        assert len(result.gradients) == 1
        assert result.gradient_summary.max_gradient_mV_m == pytest.approx(350.0)
        assert result.interpretation.startswith("ATTENTION REQUIRED")
        assert result.parameters == context.params

    def test_cache_hit(self, context):
        first = context.analyze()
        assert context.analyze() is first
        assert context.get_stats()["cached_analyses"] == 1

    def test_cache_is_bounded(self, context):
        for i in range(MAX_CACHED_ANALYSES + 5):
            context.update_cell(0, 0, -0.01 * i)
            context.analyze()
        assert context.get_stats()["cached_analyses"] == MAX_CACHED_ANALYSES

    def test_oldest_snapshot_evicted_first(self, context):
        first_key = context.cache_key()
        first = context.analyze()
        for i in range(1, MAX_CACHED_ANALYSES):
            context.update_cell(0, 0, -0.01 * i)
            context.analyze()

        # Touching the first snapshot again keeps it over newer ones
        context.update_cell(0, 0, -0.40)
        assert context.cache_key() == first_key
        assert context.analyze() is first

        context.update_cell(0, 0, -0.99)
        context.analyze()
        context.update_cell(0, 0, -0.40)
        assert context.analyze() is first

    def test_edit_invalidates(self, context):
        first = context.analyze()
        context.update_cell(0, 0, -0.10)
        second = context.analyze()
        assert second is not first
        assert second.statistics.severe.count == 0

    def test_parameter_change_invalidates(self, context):
        key = context.cache_key()
        context.update_parameters(cover_depth_mm=80)
        assert context.cache_key() != key
        assert "High Concrete Cover" in [r.title for r in context.analyze().recommendations]

    def test_cache_key_deterministic(self, context):
        grid = context.grid
        other = AssessmentContext(grid=grid)
        assert other.cache_key() == context.cache_key()

    def test_clear_cache(self, context):
        first = context.analyze()
        context.clear_cache()
        assert context.analyze() is not first

    def test_degenerate_grid(self):
        ctx = AssessmentContext(grid=PotentialGrid.from_lists([0, 1, 2], [0], [[-0.1, -0.4, -0.3]]))
        result = ctx.analyze()
        assert result.gradients == []
        assert result.gradient_summary.degenerate_axis is True
        assert result.gradient_matrix.matrix == []

    def test_analyze_survey_matches_context(self, context):
        assert analyze_survey(context.grid, context.params) == context.analyze()


class TestGlobalContext:
    """Module-level context instance"""

    def test_get_and_reset(self):
        reset_global_context()
        ctx1 = get_global_context()
        assert get_global_context() is ctx1
        reset_global_context()
        assert get_global_context() is not ctx1


class TestSessionReport:
    """Report built from the session state"""

    def test_report_uses_session_metadata(self, context):
        context.comments = "Wet surface at the time of testing."
        context.inspection = InspectionInfo(location="Deck slab D1")
        context.photos = [AttachedPhoto(id="p1", name="deck.jpg")]

        document = context.build_report(generated_at=datetime(2024, 1, 2, 9, 0))

        assert "photos" in document.section_keys()
        assert document.section("comments").blocks[1].text == "Wet surface at the time of testing."
        assert document.generated_at == "2024-01-02T09:00"

    def test_report_stamped_at_call_time(self, context):
        before = datetime.now().replace(second=0, microsecond=0)
        document = context.build_report()
        after = datetime.now()

        stamped = datetime.fromisoformat(document.generated_at)
        assert before <= stamped <= after
