"""
Half-Cell Potential Mapping MCP Server

FastMCP server providing ASTM C876 half-cell potential survey assessment
tools for AI agents.

Pipeline:
- Classification: severe / uncertain / low risk bands per reference electrode
- Statistics: mean, standard deviation, range (mV)
- Gradients: discrete potential gradient field (mV/m), macrocell detection
- Rules: ordered technical recommendations with ASTM C876-15 references
- Report: renderer-agnostic document model (sections, tables, chart placeholders)

Usage:
    python server.py
"""

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
import anyio
import logging
from typing import List, Optional

from tools.potential.analyze_potential_map import (
    analyze_potential_map,
    calculate_gradient_map,
    list_electrode_catalog,
)
from tools.potential.grid_io import import_survey_csv, export_survey_csv
from tools.report.build_report import build_potential_report

from core.schemas import AttachedPhoto, InspectionInfo
from data import supported_electrodes

# Pydantic imports for input validation
from pydantic import BaseModel, Field, ConfigDict, field_validator

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# ============================================================================
# Pydantic Input Models
# ============================================================================

class SurveyGridInput(BaseModel):
    """Survey grid: coordinates in meters, potentials in volts."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    x_vals: List[float] = Field(
        ...,
        description="Column coordinates in meters, ascending (e.g., [0.0, 0.15, 0.30])",
        min_length=1,
    )
    y_vals: List[float] = Field(
        ...,
        description="Row coordinates in meters, descending (e.g., [1.94, 1.84])",
        min_length=1,
    )
    matrix_V: List[List[float]] = Field(
        ...,
        description="Potentials in volts; matrix_V[r][c] measured at (x_vals[c], y_vals[r])",
        min_length=1,
    )


class AnalyzeGridInput(SurveyGridInput):
    """Input for ASTM C876 survey assessment."""

    electrode: str = Field(
        default="CSE",
        description="Reference electrode: CSE (Cu/CuSO4), SCE (calomel) or AgAgCl (3M KCl)",
    )
    cover_depth_mm: int = Field(
        default=30,
        description="Concrete cover over the reinforcement in mm",
        gt=0,
        le=500,
    )
    resistivity_kohm_cm: Optional[float] = Field(
        default=None,
        description="Concrete resistivity in kΩ·cm (omit if not measured)",
        gt=0,
    )
    severe_threshold_mV: Optional[float] = Field(
        default=None,
        description="Override the electrode's severe threshold (mV)",
    )
    low_threshold_mV: Optional[float] = Field(
        default=None,
        description="Override the electrode's low-risk threshold (mV)",
    )

    @field_validator('electrode')
    @classmethod
    def validate_electrode(cls, v: str) -> str:
        options = supported_electrodes()
        if v not in options:
            raise ValueError(f"Electrode '{v}' not supported. Options: {options}")
        return v


class BuildReportInput(AnalyzeGridInput):
    """Input for report document assembly."""

    comments: Optional[str] = Field(
        default=None,
        description="Inspector observations printed in the comments section",
        max_length=10000,
    )
    inspection: Optional[InspectionInfo] = Field(
        default=None,
        description="Test date, location and responsible engineer details",
    )
    photos: List[AttachedPhoto] = Field(
        default_factory=list,
        description="Photo attachment metadata ({id, name, description})",
        max_length=50,
    )


class ImportCSVInput(BaseModel):
    """Input for survey CSV import."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    csv_text: str = Field(
        ...,
        description="CSV text: 'Y/X;x1;x2;...' header, then 'y;v1;v2;...' rows (';' or ',' delimited)",
        min_length=1,
    )


# ============================================================================
# Initialize FastMCP Server
# ============================================================================

mcp = FastMCP("Half-Cell Potential Mapping")


# ============================================================================
# Reference Data
# ============================================================================

@mcp.tool(
    name="potential_list_electrodes",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,
    )
)
async def list_electrodes() -> dict:
    """
    List supported reference electrodes and their ASTM C876 thresholds.

    Returns:
        Dictionary with "electrodes": [{name, label, severe_threshold_mV,
        low_threshold_mV, source}, ...] in catalog order.
    """
    return {"electrodes": list_electrode_catalog()}


# ============================================================================
# Survey Analysis
# ============================================================================

@mcp.tool(
    name="potential_analyze_grid",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,
    )
)
async def analyze_grid(params: AnalyzeGridInput) -> dict:
    """
    Assess a half-cell potential survey per ASTM C876-15.

    Args:
        params (AnalyzeGridInput): Validated input parameters containing:
            - x_vals, y_vals (List[float]): Grid coordinates in meters
            - matrix_V (List[List[float]]): Potentials in volts
            - electrode (str): CSE, SCE or AgAgCl (selects thresholds)
            - cover_depth_mm (int): Concrete cover
            - resistivity_kohm_cm (Optional[float]): Concrete resistivity
            - severe_threshold_mV / low_threshold_mV (Optional[float]): Overrides

    Returns:
        Dictionary with statistics, uncertain_points, gradients,
        gradient_summary, interpretation, recommendations and parameters.

    Example:
        result = await analyze_grid(AnalyzeGridInput(
            x_vals=[0, 1], y_vals=[1, 0],
            matrix_V=[[-0.40, -0.10], [-0.05, -0.02]],
        ))
        print(result["statistics"]["severe"]["count"])  # 1
    """
    logger.info(
        f"Analyzing {len(params.y_vals)}x{len(params.x_vals)} survey ({params.electrode})"
    )
    try:
        return await anyio.to_thread.run_sync(
            lambda: analyze_potential_map(
                x_vals=params.x_vals,
                y_vals=params.y_vals,
                matrix_V=params.matrix_V,
                electrode=params.electrode,
                cover_depth_mm=params.cover_depth_mm,
                resistivity_kohm_cm=params.resistivity_kohm_cm,
                severe_threshold_mV=params.severe_threshold_mV,
                low_threshold_mV=params.low_threshold_mV,
            )
        )
    except ValueError as exc:
        logger.error(f"Survey analysis failed: {exc}")
        raise


@mcp.tool(
    name="potential_gradient_map",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,
    )
)
async def gradient_map(params: SurveyGridInput) -> dict:
    """
    Dense potential gradient field (mV/m) for contour and surface charts.

    gradient = max(|ΔVx|/Δx, |ΔVy|/Δy) × 1000 over every interior cell.
    The returned axes are truncated by one (x_vals[:-1], y_vals[:-1]).

    Returns:
        Dictionary with x_vals, y_vals, matrix, spacing_m and summary.
    """
    try:
        return await anyio.to_thread.run_sync(
            lambda: calculate_gradient_map(params.x_vals, params.y_vals, params.matrix_V)
        )
    except ValueError as exc:
        logger.error(f"Gradient map failed: {exc}")
        raise


# ============================================================================
# Report
# ============================================================================

@mcp.tool(
    name="potential_build_report",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,
    )
)
async def build_report(params: BuildReportInput) -> dict:
    """
    Build the potential mapping report document.

    Sections (in order): header, executive_summary, risk_table,
    recommendations, potential_map_2d, potential_surface_3d, gradient_map,
    gradient_methodology, gradient_points, uncertain_points, comments,
    photos (only with attachments), signature, footer.

    Returns:
        Dictionary with title, subtitle, generated_at, sections and
        image_identifiers (charts a renderer must capture).
    """
    logger.info(f"Building report for {len(params.y_vals)}x{len(params.x_vals)} survey")
    try:
        return await anyio.to_thread.run_sync(
            lambda: build_potential_report(
                x_vals=params.x_vals,
                y_vals=params.y_vals,
                matrix_V=params.matrix_V,
                electrode=params.electrode,
                cover_depth_mm=params.cover_depth_mm,
                resistivity_kohm_cm=params.resistivity_kohm_cm,
                severe_threshold_mV=params.severe_threshold_mV,
                low_threshold_mV=params.low_threshold_mV,
                comments=params.comments,
                inspection=params.inspection.model_dump() if params.inspection else None,
                photos=[p.model_dump() for p in params.photos],
            )
        )
    except ValueError as exc:
        logger.error(f"Report build failed: {exc}")
        raise


# ============================================================================
# CSV Import / Export
# ============================================================================

@mcp.tool(
    name="potential_import_csv",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,
    )
)
async def import_csv(params: ImportCSVInput) -> dict:
    """
    Parse survey CSV text into grid lists.

    Comma or dot decimals are accepted; unparseable numbers read as 0.
    Fails when there is no header plus data row, or rows are ragged.

    Returns:
        Dictionary with x_vals (ascending), y_vals (descending), matrix (V)
        and shape.
    """
    try:
        return import_survey_csv(params.csv_text)
    except ValueError as exc:
        logger.error(f"CSV import failed: {exc}")
        raise


@mcp.tool(
    name="potential_export_csv",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,
    )
)
async def export_csv(params: SurveyGridInput) -> dict:
    """
    Format a survey grid as CSV text (';' delimited, two decimals, ',' decimal separator).

    Returns:
        Dictionary with "csv_text".
    """
    try:
        return {"csv_text": export_survey_csv(params.x_vals, params.y_vals, params.matrix_V)}
    except ValueError as exc:
        logger.error(f"CSV export failed: {exc}")
        raise


# ============================================================================
# Server Information
# ============================================================================

@mcp.tool(
    name="potential_get_server_info",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,  # Returns static server info
    )
)
async def get_server_info() -> dict:
    """
    Get half-cell potential mapping MCP server information.

    Returns:
        Dictionary with server version, standard, supported electrodes and tool registry
    """
    tool_registry = [
        {
            "name": "potential_list_electrodes",
            "stage": "reference",
            "description": "Reference electrodes and ASTM C876 threshold pairs",
        },
        {
            "name": "potential_analyze_grid",
            "stage": "analysis",
            "description": "Risk classification, statistics, gradients and recommendations",
        },
        {
            "name": "potential_gradient_map",
            "stage": "analysis",
            "description": "Dense gradient field (mV/m) for charts",
        },
        {
            "name": "potential_build_report",
            "stage": "report",
            "description": "Renderer-agnostic report document model",
        },
        {
            "name": "potential_import_csv",
            "stage": "io",
            "description": "Survey CSV to grid lists",
        },
        {
            "name": "potential_export_csv",
            "stage": "io",
            "description": "Grid lists to survey CSV",
        },
        {
            "name": "potential_get_server_info",
            "stage": "metadata",
            "description": "Server information and tool registry",
        },
    ]

    return {
        "name": "Half-Cell Potential Mapping MCP Server",
        "version": "0.1.0",
        "standard": "ASTM C876-15",
        "tool_count": len(tool_registry),
        "tool_registry": tool_registry,
        "supported_electrodes": supported_electrodes(),
        "units": {
            "potential_input": "V",
            "potential_output": "mV",
            "coordinates": "m",
            "gradient": "mV/m",
        },
    }


# ============================================================================
# Run Server
# ============================================================================

if __name__ == "__main__":
    logger.info("=" * 70)
    logger.info("Half-Cell Potential Mapping MCP Server")
    logger.info("=" * 70)
    logger.info(f"Supported electrodes: {', '.join(supported_electrodes())}")
    logger.info("=" * 70)

    mcp.run()
