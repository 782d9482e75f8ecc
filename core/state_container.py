"""
State container for a half-cell potential assessment session.

Holds the survey being edited (grid, parameters, comments, inspection
metadata, photo attachments) and caches the derived analysis so that
repeated tool calls over an unchanged survey do not recompute it.

Every edit replaces the held grid or parameters with a new immutable
value; the cache key is a hash of the (grid, parameters) snapshot, so a
stale result can never be served after an edit.
"""

from collections import OrderedDict
from typing import Any, Dict, List, Optional, Sequence
from datetime import datetime
import hashlib
import json
import logging

from core.grid import PotentialGrid, default_survey
from core.gradient_backend import GradientBackend
from core.interpretation import interpret_statistics
from core.recommendation_rules import generate_recommendations
from core.report_builder import build_report_document
from core.report_document import ReportDocument
from core.schemas import AssessmentResult, AttachedPhoto, InspectionInfo, SurveyParameters
from core.statistics_backend import StatisticsBackend
from utils.grid_csv import export_grid_csv, import_grid_csv

logger = logging.getLogger(__name__)

# Snapshots kept in the analysis cache; the oldest is evicted first
MAX_CACHED_ANALYSES = 8


def analyze_survey(grid: PotentialGrid, params: SurveyParameters) -> AssessmentResult:
    """
    Run the full analysis pipeline over one (grid, parameters) snapshot.

    grid → statistics + uncertain points → gradients → recommendations
    → interpretation
    """
    stats_backend = StatisticsBackend()
    gradient_backend = GradientBackend()

    stats = stats_backend.calculate_statistics(grid, params.severe_threshold_mV, params.low_threshold_mV)
    uncertain = stats_backend.get_uncertain_points(grid, params.severe_threshold_mV, params.low_threshold_mV)
    gradients = gradient_backend.calculate_gradients(grid)

    return AssessmentResult(
        statistics=stats,
        uncertain_points=uncertain,
        gradients=gradients,
        gradient_matrix=gradient_backend.calculate_gradient_matrix(grid),
        gradient_summary=gradient_backend.summarize(gradients, degenerate_axis=grid.is_degenerate),
        recommendations=generate_recommendations(stats, gradients, params),
        interpretation=interpret_statistics(stats),
        parameters=params,
    )


class AssessmentContext:
    """
    In-memory assessment session.

    Usage:
        context = AssessmentContext()
        context.regenerate_grid([0, 0.15, 0.30], [1.0, 0.9])
        context.update_cell(0, 1, -0.42)
        context.set_electrode("SCE")

        result = context.analyze()       # computed
        result = context.analyze()       # served from cache
    """

    def __init__(
        self,
        grid: Optional[PotentialGrid] = None,
        params: Optional[SurveyParameters] = None,
    ):
        """Start from the demonstration survey and default CSE parameters."""
        self._grid = grid if grid is not None else default_survey()
        self._params = params if params is not None else SurveyParameters()
        self.comments: str = ""
        self.inspection = InspectionInfo()
        self.photos: List[AttachedPhoto] = []
        self._analysis_cache: "OrderedDict[str, AssessmentResult]" = OrderedDict()
        self._metadata: Dict[str, Any] = {
            "created_at": datetime.now(),
            "edits": 0,
        }

    @property
    def grid(self) -> PotentialGrid:
        return self._grid

    @property
    def params(self) -> SurveyParameters:
        return self._params

    # ========================================================================
    # Survey editing
    # ========================================================================

    def set_grid(self, grid: PotentialGrid):
        self._grid = grid
        self._metadata["edits"] += 1

    def update_cell(self, row: int, col: int, value: float):
        """Replace one potential (V). Raises IndexError outside the grid."""
        self.set_grid(self._grid.with_cell(row, col, value))

    def regenerate_grid(self, x_vals: Sequence[float], y_vals: Sequence[float]):
        """New empty survey over the given axes (x ascending, y descending, 0 V)."""
        self.set_grid(PotentialGrid.from_axes(x_vals, y_vals))

    def set_electrode(self, electrode: str):
        """Select a reference electrode; both thresholds reset to its catalog values."""
        self._params = self._params.with_electrode(electrode)
        self._metadata["edits"] += 1

    def update_parameters(self, **updates):
        """
        Merge parameter updates.

        The merged values are re-validated, so an invalid update (e.g. an
        inverted threshold pair) raises and leaves the parameters unchanged.
        """
        merged = {**self._params.model_dump(), **updates}
        self._params = SurveyParameters(**merged)
        self._metadata["edits"] += 1

    def import_csv(self, text: str):
        """Replace the grid from CSV text; on MalformedImportError the grid is untouched."""
        grid = import_grid_csv(text)
        self.set_grid(grid)

    def export_csv(self) -> str:
        return export_grid_csv(self._grid)

    # ========================================================================
    # Analysis
    # ========================================================================

    def analyze(self) -> AssessmentResult:
        """Analysis of the current snapshot, cached by its content hash (latest MAX_CACHED_ANALYSES kept)."""
        cache_key = self.cache_key()
        cached = self._analysis_cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Analysis cache hit: {cache_key}")
            self._analysis_cache.move_to_end(cache_key)
            return cached

        result = analyze_survey(self._grid, self._params)
        self._analysis_cache[cache_key] = result
        while len(self._analysis_cache) > MAX_CACHED_ANALYSES:
            self._analysis_cache.popitem(last=False)
        return result

    def build_report(self, generated_at: Optional[datetime] = None) -> ReportDocument:
        """Report document for the current snapshot, stamped with generated_at or the current time."""
        return build_report_document(
            self.analyze(),
            generated_at=generated_at or datetime.now(),
            comments=self.comments,
            inspection=self.inspection,
            photos=self.photos,
        )

    def cache_key(self) -> str:
        return self._compute_cache_key({
            "grid": self._grid.to_dict(),
            "params": self._params.model_dump(),
        })

    def _compute_cache_key(self, inputs: Dict[str, Any]) -> str:
        """SHA256 of sorted JSON, so key order never changes the hash."""
        sorted_inputs = json.dumps(inputs, sort_keys=True)
        return hashlib.sha256(sorted_inputs.encode()).hexdigest()[:16]

    def clear_cache(self):
        self._analysis_cache.clear()

    def get_stats(self) -> Dict[str, Any]:
        return {
            "grid_shape": list(self._grid.shape),
            "electrode": self._params.electrode,
            "cached_analyses": len(self._analysis_cache),
            "edits": self._metadata["edits"],
            "created_at": self._metadata["created_at"],
        }


# ============================================================================
# Global Context Instance
# ============================================================================

_global_context = None


def get_global_context() -> AssessmentContext:
    """Get or create global context instance"""
    global _global_context
    if _global_context is None:
        _global_context = AssessmentContext()
    return _global_context


def reset_global_context():
    """Reset global context (useful for testing)"""
    global _global_context
    _global_context = None
