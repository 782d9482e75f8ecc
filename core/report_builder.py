"""
Report Builder - ASTM C876 potential mapping report

Assembles the renderer-agnostic ReportDocument from a completed
assessment. The builder performs no I/O and never reads the clock; the
caller supplies the generation timestamp. Chart images are referenced by
identifier only and photo attachments by metadata only.

Section order:
    header → executive summary → risk table (+ distribution charts)
    → recommendations → 2D map → 3D surface → gradient map
    → gradient methodology → gradient points → uncertain points
    → comments → photos (optional) → signature → footer

Tables limited to N rows report the remainder as a trailing
"and N more ... not shown" note; the count is never dropped.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from core.gradient_backend import classify_gradient
from core.recommendation_rules import format_verbatim
from core.report_document import (
    HeadingBlock,
    ImagePlaceholder,
    KeyValueBox,
    KeyValueItem,
    MetricTriplet,
    ReportDocument,
    ReportSection,
    TableBlock,
    TextBlock,
)
from core.schemas import (
    AssessmentResult,
    AttachedPhoto,
    GradientPoint,
    InspectionInfo,
    UncertainPoint,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Report layout constants
# ---------------------------------------------------------------------------

GRADIENT_TABLE_LIMIT = 10
UNCERTAIN_TABLE_LIMIT = 10

REPORT_TITLE = "HALF-CELL POTENTIAL MAPPING REPORT"
REPORT_SUBTITLE = "Reinforcement Corrosion Assessment - ASTM C876"
FOOTER_TEXT = (
    "Report generated in accordance with ASTM C876-15: Standard Test Method for "
    "Corrosion Potentials of Uncoated Reinforcing Steel in Concrete"
)
COMMENTS_PLACEHOLDER = "Space reserved for inspector observations."

# Chart identifiers the renderer is expected to capture
CHART_HISTOGRAM = "potential_histogram"
CHART_RISK_PIE = "risk_distribution_pie"
CHART_MAP_2D = "potential_map_2d"
CHART_SURFACE_3D = "potential_surface_3d"
CHART_GRADIENT = "gradient_map"

BAND_COLORS = {
    "severe": "#E74C3C",
    "uncertain": "#F1C40F",
    "low": "#2ECC71",
}

GRADIENT_EXPLANATION = """The potential gradient is computed as the maximum change in potential between adjacent points divided by the distance between them. The formula used is:

Gradient = max(|ΔVx|/Δx, |ΔVy|/Δy) × 1000 [mV/m]

Where:
• ΔVx = potential difference between horizontally adjacent points
• ΔVy = potential difference between vertically adjacent points
• Δx, Δy = spacing between measurement points

Interpretation (ASTM C876):
• Gradients > 150 mV/m: indicate the formation of active corrosion macrocells
• Gradients > 100 mV/m: require attention - possible localized corrosion activity
• Gradients < 50 mV/m: relatively uniform conditions

High gradients in regions with negative potentials indicate active anodic zones where corrosion is progressing."""

SURFACE_3D_CAPTION = (
    "Isometric view of the potential surface. More negative values (valleys) "
    "indicate a higher probability of corrosion."
)


def _fmt(value: float, decimals: int = 2) -> str:
    return f"{value:.{decimals}f}"


def truncation_note(total: int, limit: int, noun: str) -> Optional[str]:
    """'... and N more <noun> not shown' when total exceeds limit, else None."""
    if total > limit:
        return f"... and {total - limit} more {noun} not shown"
    return None


class ReportBuilder:
    """
    Builds a ReportDocument from an AssessmentResult.

    Usage:
        builder = ReportBuilder()
        document = builder.build(result, datetime(2024, 5, 2, 14, 30), comments="Deck slab, bay 3")
        document.image_identifiers()  # charts the renderer must capture
    """

    def __init__(
        self,
        gradient_table_limit: int = GRADIENT_TABLE_LIMIT,
        uncertain_table_limit: int = UNCERTAIN_TABLE_LIMIT,
    ):
        self.gradient_table_limit = gradient_table_limit
        self.uncertain_table_limit = uncertain_table_limit

    def build(
        self,
        result: AssessmentResult,
        generated_at: datetime,
        comments: Optional[str] = None,
        inspection: Optional[InspectionInfo] = None,
        photos: Sequence[AttachedPhoto] = (),
    ) -> ReportDocument:
        """
        Assemble the report document.

        Args:
            result: Completed assessment (statistics, gradients, recommendations)
            generated_at: Timestamp printed in the header and footer
            comments: Free-text inspector comments; a placeholder is used when empty
            inspection: Inspection metadata for header and signature
            photos: Photo attachment metadata; the section is omitted when empty

        Returns:
            ReportDocument with sections in fixed order
        """
        inspection = inspection or InspectionInfo()

        numbering = _SectionNumbering()
        sections = [
            self._header_section(result, inspection, generated_at),
            self._summary_section(result, numbering.next()),
            self._risk_section(result, numbering.next()),
            self._recommendation_section(result, numbering.next()),
            self._map_2d_section(numbering.next()),
            self._surface_3d_section(numbering.next()),
        ]

        gradient_number = numbering.next()
        sections.extend([
            self._gradient_map_section(gradient_number),
            self._gradient_methodology_section(result, f"{gradient_number}.1"),
            self._gradient_points_section(result.gradients, f"{gradient_number}.2"),
            self._uncertain_points_section(result.uncertain_points, numbering.next()),
            self._comments_section(comments, numbering.next()),
        ])

        if photos:
            sections.append(self._photos_section(photos, numbering.next()))

        sections.append(self._signature_section(inspection, numbering.next()))
        sections.append(ReportSection(key="footer", blocks=[TextBlock(text=FOOTER_TEXT, style="caption")]))

        document = ReportDocument(
            title=REPORT_TITLE,
            subtitle=REPORT_SUBTITLE,
            generated_at=generated_at.isoformat(timespec="minutes"),
            sections=sections,
        )

        logger.info(
            f"Built report: {len(document.sections)} sections, "
            f"{len(document.image_identifiers())} chart placeholders, "
            f"{len(result.recommendations)} recommendations"
        )
        return document

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _header_section(
        self,
        result: AssessmentResult,
        inspection: InspectionInfo,
        generated_at: datetime,
    ) -> ReportSection:
        items = [
            KeyValueItem(label="Report date", value=generated_at.strftime("%Y-%m-%d %H:%M")),
            KeyValueItem(label="Reference electrode", value=result.parameters.electrode),
        ]
        if inspection.test_date:
            items.append(KeyValueItem(label="Test date", value=inspection.test_date))
        if inspection.location:
            items.append(KeyValueItem(label="Location", value=inspection.location))

        return ReportSection(key="header", blocks=[
            HeadingBlock(text=REPORT_TITLE, level=1),
            TextBlock(text=REPORT_SUBTITLE, style="caption"),
            KeyValueBox(title="Report Information", items=items),
        ])

    def _summary_section(self, result: AssessmentResult, number: str) -> ReportSection:
        params = result.parameters
        stats = result.statistics
        resistivity = (
            f"{format_verbatim(params.resistivity_kohm_cm)} kΩ·cm" if params.resistivity_kohm_cm is not None else "-"
        )

        return ReportSection(key="executive_summary", blocks=[
            HeadingBlock(text=f"{number}. EXECUTIVE SUMMARY"),
            KeyValueBox(title="Test Parameters", items=[
                KeyValueItem(label="Electrode", value=params.electrode),
                KeyValueItem(label="Cover", value=f"{params.cover_depth_mm} mm"),
                KeyValueItem(label="Resistivity", value=resistivity),
            ]),
            KeyValueBox(title="Global Statistics", items=[
                KeyValueItem(label="Mean", value=f"{stats.mean_mV:.0f} mV"),
                KeyValueItem(label="Standard deviation", value=f"{stats.std_dev_mV:.0f} mV"),
                KeyValueItem(label="Range", value=f"{stats.min_mV:.0f} to {stats.max_mV:.0f} mV"),
                KeyValueItem(label="Total points", value=str(stats.total)),
            ]),
            TextBlock(title="Interpretation", text=result.interpretation, style="emphasis"),
        ])

    def _risk_section(self, result: AssessmentResult, number: str) -> ReportSection:
        params = result.parameters
        stats = result.statistics
        severe = format_verbatim(params.severe_threshold_mV)
        low = format_verbatim(params.low_threshold_mV)

        rows = [
            ["High risk (>90% prob. corrosion)", f"< {severe}",
             str(stats.severe.count), f"{stats.severe.percentage:.1f}%"],
            ["Uncertain (transition zone)", f"{severe} to {low}",
             str(stats.uncertain.count), f"{stats.uncertain.percentage:.1f}%"],
            ["Low risk (>90% prob. passive)", f"> {low}",
             str(stats.low.count), f"{stats.low.percentage:.1f}%"],
        ]

        return ReportSection(key="risk_table", blocks=[
            HeadingBlock(text=f"{number}. RISK ANALYSIS PER ASTM C876"),
            TableBlock(
                columns=["ASTM classification", "Range (mV)", "Points", "Percentage"],
                rows=rows,
                row_colors=[BAND_COLORS["severe"], BAND_COLORS["uncertain"], BAND_COLORS["low"]],
                total_rows=3,
                shown_rows=3,
                note=f"* Limits based on ASTM C876-15 for reference electrode {params.electrode}",
            ),
            ImagePlaceholder(identifier=CHART_HISTOGRAM, caption="Potential distribution"),
            ImagePlaceholder(identifier=CHART_RISK_PIE, caption="Risk band distribution"),
        ])

    def _recommendation_section(self, result: AssessmentResult, number: str) -> ReportSection:
        blocks = [HeadingBlock(text=f"{number}. TECHNICAL RECOMMENDATIONS")]
        for rec in result.recommendations:
            blocks.append(TextBlock(
                title=rec.title,
                text=rec.description,
                tone=rec.type.value,
                reference=rec.standard_ref,
            ))
        if not result.recommendations:
            blocks.append(TextBlock(text="No specific recommendations for this survey.", style="placeholder"))
        return ReportSection(key="recommendations", blocks=blocks)

    def _map_2d_section(self, number: str) -> ReportSection:
        return ReportSection(key="potential_map_2d", blocks=[
            HeadingBlock(text=f"{number}. POTENTIAL MAP (2D)"),
            ImagePlaceholder(identifier=CHART_MAP_2D),
        ])

    def _surface_3d_section(self, number: str) -> ReportSection:
        return ReportSection(key="potential_surface_3d", blocks=[
            HeadingBlock(text=f"{number}. 3D TOPOGRAPHY (ISOMETRIC VIEW)"),
            ImagePlaceholder(identifier=CHART_SURFACE_3D, caption=SURFACE_3D_CAPTION),
        ])

    def _gradient_map_section(self, number: str) -> ReportSection:
        return ReportSection(key="gradient_map", blocks=[
            HeadingBlock(text=f"{number}. POTENTIAL GRADIENT MAP"),
            ImagePlaceholder(identifier=CHART_GRADIENT),
        ])

    def _gradient_methodology_section(self, result: AssessmentResult, number: str) -> ReportSection:
        summary = result.gradient_summary
        blocks = [
            HeadingBlock(text=f"{number} GRADIENT CALCULATION METHODOLOGY", level=3),
            MetricTriplet(title="Gradient Statistics", metrics=[
                KeyValueItem(label="Maximum gradient", value=f"{summary.max_gradient_mV_m:.0f} mV/m"),
                KeyValueItem(label="Mean gradient", value=f"{summary.mean_gradient_mV_m:.0f} mV/m"),
                KeyValueItem(label="Critical points (>100 mV/m)", value=str(summary.critical_count)),
            ]),
            TextBlock(text=GRADIENT_EXPLANATION),
        ]
        if summary.degenerate_axis:
            blocks.append(TextBlock(
                text="Gradients not computed: the grid has fewer than 2 rows or 2 columns.",
                style="placeholder",
            ))
        return ReportSection(key="gradient_methodology", blocks=blocks)

    def _gradient_points_section(self, gradients: List[GradientPoint], number: str) -> ReportSection:
        blocks = [HeadingBlock(text=f"{number} GRADIENT POINTS", level=3)]
        if not gradients:
            blocks.append(TextBlock(text="No gradient points calculated.", style="placeholder"))
            return ReportSection(key="gradient_points", blocks=blocks)

        # Stable sort: equal gradients keep scan order
        ranked = sorted(gradients, key=lambda g: g.gradient_mV_m, reverse=True)
        shown = ranked[:self.gradient_table_limit]

        blocks.append(TableBlock(
            columns=["X (m)", "Y (m)", "Gradient (mV/m)", "Status"],
            rows=[
                [_fmt(g.x), _fmt(g.y), _fmt(g.gradient_mV_m, 1), classify_gradient(g.gradient_mV_m)]
                for g in shown
            ],
            total_rows=len(gradients),
            shown_rows=len(shown),
            note=truncation_note(len(gradients), self.gradient_table_limit, "points"),
        ))
        return ReportSection(key="gradient_points", blocks=blocks)

    def _uncertain_points_section(self, points: List[UncertainPoint], number: str) -> ReportSection:
        blocks = [
            HeadingBlock(text=f"{number}. POINTS IN UNCERTAIN ZONE"),
        ]
        if not points:
            blocks.append(TextBlock(text="No points in the uncertain zone.", style="placeholder"))
            return ReportSection(key="uncertain_points", blocks=blocks)

        shown = points[:self.uncertain_table_limit]
        blocks.extend([
            TextBlock(text="Points in the transition zone that require special attention."),
            TableBlock(
                columns=["X (m)", "Y (m)", "Potential (mV)"],
                rows=[[_fmt(p.x), _fmt(p.y), f"{p.value_mV:.0f}"] for p in shown],
                total_rows=len(points),
                shown_rows=len(shown),
                note=truncation_note(len(points), self.uncertain_table_limit, "points"),
            ),
        ])
        return ReportSection(key="uncertain_points", blocks=blocks)

    def _comments_section(self, comments: Optional[str], number: str) -> ReportSection:
        text = (comments or "").strip()
        block = (
            TextBlock(text=text)
            if text
            else TextBlock(text=COMMENTS_PLACEHOLDER, style="placeholder")
        )
        return ReportSection(key="comments", blocks=[
            HeadingBlock(text=f"{number}. OBSERVATIONS AND COMMENTS"),
            block,
        ])

    def _photos_section(self, photos: Sequence[AttachedPhoto], number: str) -> ReportSection:
        return ReportSection(key="photos", blocks=[
            HeadingBlock(text=f"{number}. PHOTOGRAPHIC RECORD"),
            TableBlock(
                columns=["ID", "Name", "Description"],
                rows=[[p.id, p.name, p.description or "-"] for p in photos],
                total_rows=len(photos),
                shown_rows=len(photos),
            ),
        ])

    def _signature_section(self, inspection: InspectionInfo, number: str) -> ReportSection:
        items = [
            KeyValueItem(label="Signature of the responsible engineer", value=""),
            KeyValueItem(label="Date", value=""),
        ]
        for label, value in (
            ("Name", inspection.responsible_name),
            ("Role", inspection.responsible_role),
            ("Registration", inspection.registration_number),
            ("Responsibility record", inspection.responsibility_record),
        ):
            if value:
                items.append(KeyValueItem(label=label, value=value))

        return ReportSection(key="signature", blocks=[
            HeadingBlock(text=f"{number}. TECHNICAL RESPONSIBILITY"),
            KeyValueBox(title="Responsible Engineer", items=items),
        ])


class _SectionNumbering:
    def __init__(self):
        self._n = 0

    def next(self) -> str:
        self._n += 1
        return str(self._n)


def build_report_document(
    result: AssessmentResult,
    generated_at: datetime,
    comments: Optional[str] = None,
    inspection: Optional[InspectionInfo] = None,
    photos: Sequence[AttachedPhoto] = (),
) -> ReportDocument:
    return ReportBuilder().build(
        result,
        comments=comments,
        inspection=inspection,
        photos=photos,
        generated_at=generated_at,
    )
