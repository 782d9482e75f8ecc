"""
Core analysis package for the half-cell potential mapping MCP server.

This module provides:
- Survey grid model (immutable PotentialGrid)
- Standardized pydantic schemas (parameters, statistics, gradients, recommendations)
- Renderer-agnostic report document model
- Rendering plugin contracts (ChartCapture, DocumentWriter)

Computation backends (statistics, gradients, rules, report builder) and
the AssessmentContext state container are imported from their modules.
"""

from .grid import GridShapeError, MalformedImportError, PotentialGrid, default_survey
from .schemas import (
    SurveyParameters,
    InspectionInfo,
    AttachedPhoto,
    PotentialStatistics,
    GradientPoint,
    GradientSummary,
    Recommendation,
    RecommendationType,
    AssessmentResult,
)
from .report_document import ReportDocument
from .interfaces import ChartCapture, DocumentWriter

__all__ = [
    "GridShapeError",
    "MalformedImportError",
    "PotentialGrid",
    "default_survey",
    "SurveyParameters",
    "InspectionInfo",
    "AttachedPhoto",
    "PotentialStatistics",
    "GradientPoint",
    "GradientSummary",
    "Recommendation",
    "RecommendationType",
    "AssessmentResult",
    "ReportDocument",
    "ChartCapture",
    "DocumentWriter",
]
