"""
Pydantic models for survey parameters and analysis results.

Every stage of the analysis pipeline returns one of these frozen models:

    grid + parameters → statistics + gradients → recommendations + interpretation

All models are plain data (JSON-serializable via model_dump) so that
results can be handed to report renderers or returned from MCP tools
without carrying live references into the caller's state.

Units:
- Grid potentials are stored in volts; every reported potential is in mV
- Coordinates in meters, gradients in mV/m
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from data import DEFAULT_ELECTRODE, get_electrode


SUPPORTED_COLORSCALES = ["Jet", "Viridis", "Hot", "Portland", "RdYlGn"]


# ============================================================================
# Survey Parameters
# ============================================================================

class SurveyParameters(BaseModel):
    """
    Test parameters of a half-cell potential survey.

    Invariant: severe_threshold_mV < low_threshold_mV. Potentials below the
    severe threshold are high risk, above the low threshold low risk, and the
    closed interval in between is the uncertain band.
    """
    model_config = ConfigDict(frozen=True)

    electrode: str = Field(DEFAULT_ELECTRODE, description="Reference electrode (CSE, SCE, AgAgCl)")
    cover_depth_mm: int = Field(30, description="Concrete cover over the reinforcement (mm)", gt=0)
    resistivity_kohm_cm: Optional[float] = Field(
        None, description="Concrete resistivity (kΩ·cm); None when not measured", gt=0
    )
    severe_threshold_mV: float = Field(
        -350.0, description="Below this potential: >90% probability of corrosion", allow_inf_nan=False
    )
    low_threshold_mV: float = Field(
        -200.0, description="Above this potential: >90% probability of no corrosion", allow_inf_nan=False
    )
    colorscale: str = Field("Jet", description="Colour scale requested for chart renderers")

    @field_validator('electrode')
    @classmethod
    def validate_electrode(cls, v: str) -> str:
        return get_electrode(v).name

    @field_validator('colorscale')
    @classmethod
    def validate_colorscale(cls, v: str) -> str:
        if v not in SUPPORTED_COLORSCALES:
            raise ValueError(f"Colorscale '{v}' not supported. Options: {SUPPORTED_COLORSCALES}")
        return v

    @model_validator(mode='after')
    def thresholds_ordered(self) -> "SurveyParameters":
        if self.severe_threshold_mV >= self.low_threshold_mV:
            raise ValueError(
                f"severe_threshold_mV ({self.severe_threshold_mV}) must be below "
                f"low_threshold_mV ({self.low_threshold_mV})"
            )
        return self

    @classmethod
    def for_electrode(cls, electrode: str, **overrides) -> "SurveyParameters":
        """Build parameters with the catalog thresholds of an electrode."""
        ref = get_electrode(electrode)
        values = {
            "electrode": ref.name,
            "severe_threshold_mV": ref.severe_threshold_mV,
            "low_threshold_mV": ref.low_threshold_mV,
        }
        values.update(overrides)
        return cls(**values)

    def with_electrode(self, electrode: str) -> "SurveyParameters":
        """Switch electrode; both thresholds are reset to the catalog values."""
        ref = get_electrode(electrode)
        return self.model_copy(update={
            "electrode": ref.name,
            "severe_threshold_mV": ref.severe_threshold_mV,
            "low_threshold_mV": ref.low_threshold_mV,
        })


class InspectionInfo(BaseModel):
    """Inspection metadata printed in the report header and signature block."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    test_date: Optional[str] = Field(None, description="Date of the survey (free text or ISO date)")
    location: Optional[str] = Field(None, description="Structure / site location")
    responsible_name: Optional[str] = Field(None, description="Responsible engineer")
    responsible_role: Optional[str] = Field(None, description="Role or title of the responsible engineer")
    registration_number: Optional[str] = Field(None, description="Professional registration number")
    responsibility_record: Optional[str] = Field(None, description="Technical responsibility record number")


class AttachedPhoto(BaseModel):
    """Photo attachment metadata. Image bytes stay with the renderer."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""


# ============================================================================
# Statistics
# ============================================================================

class BandSummary(BaseModel):
    """Cell count and share of one ASTM C876 risk band"""
    model_config = ConfigDict(frozen=True)

    count: int = Field(..., ge=0)
    percentage: float = Field(..., description="Share of all cells (0-100)")


class PotentialStatistics(BaseModel):
    """
    Band classification and global statistics of a survey.

    mean/std/min/max are in mV. std_dev_mV is the population standard
    deviation (divides by total). total is at least 1 so that an empty grid
    never divides by zero.
    """
    model_config = ConfigDict(frozen=True)

    severe: BandSummary
    uncertain: BandSummary
    low: BandSummary
    mean_mV: float
    std_dev_mV: float
    min_mV: float
    max_mV: float
    total: int = Field(..., ge=1)


class UncertainPoint(BaseModel):
    """Cell whose potential lies inside the uncertain band"""
    model_config = ConfigDict(frozen=True)

    x: float = Field(..., description="x coordinate (m)")
    y: float = Field(..., description="y coordinate (m)")
    value_mV: float = Field(..., description="Potential (mV)")


# ============================================================================
# Gradients
# ============================================================================

class GradientPoint(BaseModel):
    """Potential gradient anchored at the lower-index corner of a cell"""
    model_config = ConfigDict(frozen=True)

    x: float = Field(..., description="x coordinate (m)")
    y: float = Field(..., description="y coordinate (m)")
    gradient_mV_m: float = Field(..., description="max(|dV/dx|, |dV/dy|) in mV/m", ge=0)


class GradientMatrix(BaseModel):
    """Dense gradient field over the truncated axes x_vals[:-1], y_vals[:-1]"""
    model_config = ConfigDict(frozen=True)

    x_vals: List[float]
    y_vals: List[float]
    matrix: List[List[float]]


class GradientSummary(BaseModel):
    """
    Aggregates of a gradient point list.

    degenerate_axis is True when the grid has fewer than 2 rows or columns;
    the point list is then empty and max/mean are 0.
    """
    model_config = ConfigDict(frozen=True)

    max_gradient_mV_m: float
    mean_gradient_mV_m: float
    critical_count: int = Field(..., description="Points above the critical gradient (100 mV/m)")
    point_count: int
    degenerate_axis: bool = False


# ============================================================================
# Recommendations
# ============================================================================

class RecommendationType(str, Enum):
    """Severity carried by a recommendation"""
    URGENT = "urgent"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"


class Recommendation(BaseModel):
    """Technical recommendation with optional citation of the governing clause"""
    model_config = ConfigDict(frozen=True)

    type: RecommendationType
    title: str
    description: str
    standard_ref: Optional[str] = Field(None, description="Clause of ASTM C876-15, e.g. 'ASTM C876-15, Section 6.2'")


# ============================================================================
# Full assessment
# ============================================================================

class AssessmentResult(BaseModel):
    """Everything derived from one (grid, parameters) snapshot"""
    model_config = ConfigDict(frozen=True)

    statistics: PotentialStatistics
    uncertain_points: List[UncertainPoint]
    gradients: List[GradientPoint]
    gradient_matrix: GradientMatrix
    gradient_summary: GradientSummary
    recommendations: List[Recommendation]
    interpretation: str
    parameters: SurveyParameters
