"""
Report tools - build the renderer-agnostic report document and drive
chart capture + document writing.
"""

from .build_report import build_potential_report
from .render_report import render_report

__all__ = [
    "build_potential_report",
    "render_report",
]
