"""
Tool: Build the half-cell potential mapping report document

Runs the assessment and assembles the renderer-agnostic report structure
(sections of headings, tables, text blocks and chart placeholders). The
result is JSON-ready; chart images are referenced by identifier only.
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence
import logging

from core.grid import PotentialGrid
from core.report_builder import build_report_document
from core.schemas import AttachedPhoto, InspectionInfo
from core.state_container import analyze_survey
from tools.potential.analyze_potential_map import build_parameters

logger = logging.getLogger(__name__)


def build_potential_report(
    x_vals: Sequence[float],
    y_vals: Sequence[float],
    matrix_V: Sequence[Sequence[float]],
    electrode: str = "CSE",
    cover_depth_mm: int = 30,
    resistivity_kohm_cm: Optional[float] = None,
    severe_threshold_mV: Optional[float] = None,
    low_threshold_mV: Optional[float] = None,
    comments: Optional[str] = None,
    inspection: Optional[Dict] = None,
    photos: Optional[List[Dict]] = None,
    generated_at: Optional[datetime] = None,
) -> Dict:
    """
    Build the report document for one survey.

    Args:
        x_vals, y_vals, matrix_V: Survey grid (potentials in volts)
        electrode, cover_depth_mm, resistivity_kohm_cm: Test parameters
        severe_threshold_mV, low_threshold_mV: Optional threshold overrides
        comments: Inspector comments (placeholder text when empty)
        inspection: InspectionInfo fields (test_date, location, responsible_name, ...)
        photos: Photo metadata dicts {id, name, description}
        generated_at: Report timestamp, defaults to the time of the call

    Returns:
        Dictionary with title, subtitle, generated_at, sections (ordered
        blocks) plus image_identifiers the renderer has to capture
    """
    grid = PotentialGrid.from_lists(x_vals, y_vals, matrix_V)
    params = build_parameters(
        electrode=electrode,
        cover_depth_mm=cover_depth_mm,
        resistivity_kohm_cm=resistivity_kohm_cm,
        severe_threshold_mV=severe_threshold_mV,
        low_threshold_mV=low_threshold_mV,
    )

    document = build_report_document(
        analyze_survey(grid, params),
        comments=comments,
        inspection=InspectionInfo(**(inspection or {})),
        photos=[AttachedPhoto(**p) for p in (photos or [])],
        generated_at=generated_at or datetime.now(),
    )

    return {
        **document.to_dict(),
        "image_identifiers": document.image_identifiers(),
    }
