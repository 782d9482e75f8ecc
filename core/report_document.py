"""
Renderer-agnostic report document model.

A ReportDocument is an ordered list of sections, each holding an ordered
list of typed blocks. Blocks carry plain data only, so the same document
can be written to PDF, Word, HTML or JSON by swapping the DocumentWriter.

Block kinds:
- heading            section or sub-section title
- key_value_box      titled list of label/value pairs
- table              header + rows, with an optional trailing note
- text_block         paragraph (optionally titled and toned)
- image_placeholder  opaque chart identifier the renderer must fill
- metric_triplet     three headline figures side by side
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


IMAGE_NOT_AVAILABLE = "[Image not available]"


class KeyValueItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: str


class HeadingBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["heading"] = "heading"
    text: str
    level: int = Field(2, ge=1, le=4)


class KeyValueBox(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["key_value_box"] = "key_value_box"
    title: str
    items: List[KeyValueItem]


class TableBlock(BaseModel):
    """
    Tabular block.

    When the source list was limited to shown_rows, total_rows keeps the
    full count and note carries the "and N more not shown" line.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["table"] = "table"
    columns: List[str]
    rows: List[List[str]]
    row_colors: Optional[List[Optional[str]]] = Field(None, description="Per-row colour key (hex)")
    total_rows: int = 0
    shown_rows: int = 0
    note: Optional[str] = None


class TextBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text_block"] = "text_block"
    text: str
    title: Optional[str] = None
    style: Literal["normal", "emphasis", "caption", "placeholder"] = "normal"
    tone: Optional[Literal["urgent", "warning", "info", "success"]] = None
    reference: Optional[str] = None


class ImagePlaceholder(BaseModel):
    """Chart slot; the renderer substitutes fallback_text when no image is captured."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["image_placeholder"] = "image_placeholder"
    identifier: str
    caption: Optional[str] = None
    fallback_text: str = IMAGE_NOT_AVAILABLE


class MetricTriplet(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["metric_triplet"] = "metric_triplet"
    title: str
    metrics: List[KeyValueItem] = Field(..., min_length=3, max_length=3)


ReportBlock = Annotated[
    Union[HeadingBlock, KeyValueBox, TableBlock, TextBlock, ImagePlaceholder, MetricTriplet],
    Field(discriminator="kind"),
]


class ReportSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Stable section identifier (e.g. 'risk_table')")
    blocks: List[ReportBlock]


class ReportDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    subtitle: str
    generated_at: str = Field(..., description="ISO timestamp of report generation")
    sections: List[ReportSection]

    def section(self, key: str) -> ReportSection:
        for section in self.sections:
            if section.key == key:
                return section
        raise KeyError(f"No section '{key}' in report")

    def section_keys(self) -> List[str]:
        return [s.key for s in self.sections]

    def image_identifiers(self) -> List[str]:
        """Chart identifiers in document order, for the renderer to capture."""
        return [
            block.identifier
            for section in self.sections
            for block in section.blocks
            if isinstance(block, ImagePlaceholder)
        ]

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
