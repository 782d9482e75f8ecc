"""
Survey analysis tools - ASTM C876 classification, gradients and CSV I/O.

All tools take plain coordinate/potential lists (potentials in volts) and
return JSON-ready dictionaries.
"""

from .analyze_potential_map import analyze_potential_map, calculate_gradient_map, list_electrode_catalog
from .grid_io import import_survey_csv, export_survey_csv

__all__ = [
    "analyze_potential_map",
    "calculate_gradient_map",
    "list_electrode_catalog",
    "import_survey_csv",
    "export_survey_csv",
]
