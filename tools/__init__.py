"""
MCP tool implementations for half-cell potential mapping.

Tools are organized by stage:
- potential: survey analysis (statistics, gradients, recommendations) and CSV I/O
- report: report document assembly and rendering orchestration
"""

from tools.potential.analyze_potential_map import (
    analyze_potential_map,
    calculate_gradient_map,
    list_electrode_catalog,
)
from tools.potential.grid_io import import_survey_csv, export_survey_csv
from tools.report.build_report import build_potential_report
from tools.report.render_report import render_report

__all__ = [
    "analyze_potential_map",
    "calculate_gradient_map",
    "list_electrode_catalog",
    "import_survey_csv",
    "export_survey_csv",
    "build_potential_report",
    "render_report",
]
