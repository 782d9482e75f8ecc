"""
Tool: Analyze a half-cell potential survey per ASTM C876-15

Classifies every measurement into the three ASTM C876 risk bands,
computes global statistics, the discrete potential gradient field, the
overall verdict and rule-based technical recommendations.

Risk bands (thresholds depend on the reference electrode):
- E < severe threshold:            >90% probability of active corrosion
- severe <= E <= low threshold:    uncertain (transition zone)
- E > low threshold:               >90% probability of no corrosion

Performance: <10 ms for typical surveys (a few hundred points)
"""

from typing import Dict, List, Optional, Sequence
import logging

from core.grid import PotentialGrid
from core.gradient_backend import GradientBackend
from core.schemas import SurveyParameters
from core.state_container import analyze_survey
from data import list_electrodes

logger = logging.getLogger(__name__)


def build_parameters(
    electrode: str = "CSE",
    cover_depth_mm: int = 30,
    resistivity_kohm_cm: Optional[float] = None,
    severe_threshold_mV: Optional[float] = None,
    low_threshold_mV: Optional[float] = None,
    colorscale: str = "Jet",
) -> SurveyParameters:
    """Parameters with the electrode's catalog thresholds unless overridden."""
    overrides = {
        "cover_depth_mm": cover_depth_mm,
        "resistivity_kohm_cm": resistivity_kohm_cm,
        "colorscale": colorscale,
    }
    if severe_threshold_mV is not None:
        overrides["severe_threshold_mV"] = severe_threshold_mV
    if low_threshold_mV is not None:
        overrides["low_threshold_mV"] = low_threshold_mV
    return SurveyParameters.for_electrode(electrode, **overrides)


def analyze_potential_map(
    x_vals: Sequence[float],
    y_vals: Sequence[float],
    matrix_V: Sequence[Sequence[float]],
    electrode: str = "CSE",
    cover_depth_mm: int = 30,
    resistivity_kohm_cm: Optional[float] = None,
    severe_threshold_mV: Optional[float] = None,
    low_threshold_mV: Optional[float] = None,
) -> Dict:
    """
    Full ASTM C876 assessment of one survey.

    Args:
        x_vals: Column coordinates in meters (ascending)
        y_vals: Row coordinates in meters (descending)
        matrix_V: Potentials in volts, matrix_V[r][c] at (x_vals[c], y_vals[r])
        electrode: Reference electrode name (CSE, SCE, AgAgCl)
        cover_depth_mm: Concrete cover over the reinforcement
        resistivity_kohm_cm: Concrete resistivity, if measured
        severe_threshold_mV: Override of the electrode's severe threshold
        low_threshold_mV: Override of the electrode's low-risk threshold

    Returns:
        Dictionary containing:
        - statistics: band counts/percentages, mean, std dev, min, max (mV)
        - uncertain_points: cells in the transition zone, row-major order
        - gradients: per-cell gradient points (mV/m)
        - gradient_summary: max, mean, critical count, degenerate_axis flag
        - interpretation: overall verdict sentence
        - recommendations: ordered list of {type, title, description, standard_ref}
        - parameters: effective survey parameters

    Raises:
        GridShapeError: matrix does not match the axes
        ValueError: unknown electrode or inverted thresholds

    Example:
        >>> result = analyze_potential_map([0, 1], [1, 0], [[-0.40, -0.10], [-0.05, -0.02]])
        >>> result["statistics"]["severe"]["count"]
        1
    """
    grid = PotentialGrid.from_lists(x_vals, y_vals, matrix_V)
    params = build_parameters(
        electrode=electrode,
        cover_depth_mm=cover_depth_mm,
        resistivity_kohm_cm=resistivity_kohm_cm,
        severe_threshold_mV=severe_threshold_mV,
        low_threshold_mV=low_threshold_mV,
    )

    result = analyze_survey(grid, params)

    logger.info(
        f"Analyzed {grid.n_rows}x{grid.n_cols} survey ({params.electrode}): "
        f"{len(result.recommendations)} recommendations"
    )
    return result.model_dump(mode="json", exclude={"gradient_matrix"})


def calculate_gradient_map(
    x_vals: Sequence[float],
    y_vals: Sequence[float],
    matrix_V: Sequence[Sequence[float]],
) -> Dict:
    """
    Dense gradient field for contour/surface charts.

    Returns:
        Dictionary with x_vals, y_vals (both truncated by one), matrix
        (mV/m, shape len(y_vals) x len(x_vals)), spacing_m and summary.
        A grid with fewer than 2 rows or columns yields empty lists.
    """
    grid = PotentialGrid.from_lists(x_vals, y_vals, matrix_V)
    backend = GradientBackend()

    gradient_matrix = backend.calculate_gradient_matrix(grid)
    summary = backend.summarize(backend.calculate_gradients(grid), degenerate_axis=grid.is_degenerate)
    dx, dy = backend.spacing(grid)

    return {
        **gradient_matrix.model_dump(),
        "spacing_m": {"dx": dx, "dy": dy},
        "summary": summary.model_dump(),
    }


def list_electrode_catalog() -> List[Dict]:
    """Reference electrodes with their ASTM C876 threshold pairs, in catalog order."""
    return [
        {
            "name": ref.name,
            "label": ref.label,
            "severe_threshold_mV": ref.severe_threshold_mV,
            "low_threshold_mV": ref.low_threshold_mV,
            "source": ref.source,
        }
        for ref in list_electrodes()
    ]
