"""
Tool: Survey CSV import/export

Thin wrappers over utils.grid_csv that exchange plain coordinate and
potential lists instead of PotentialGrid values.
"""

from typing import Dict, Sequence

from core.grid import PotentialGrid
from utils.grid_csv import export_grid_csv, import_grid_csv


def import_survey_csv(csv_text: str) -> Dict:
    """
    Parse survey CSV text.

    Returns:
        Dictionary with x_vals, y_vals, matrix (V) and shape [rows, cols]

    Raises:
        MalformedImportError: unusable CSV
    """
    grid = import_grid_csv(csv_text)
    return {**grid.to_dict(), "shape": list(grid.shape)}


def export_survey_csv(
    x_vals: Sequence[float],
    y_vals: Sequence[float],
    matrix_V: Sequence[Sequence[float]],
) -> str:
    return export_grid_csv(PotentialGrid.from_lists(x_vals, y_vals, matrix_V))
