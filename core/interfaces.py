"""
Abstract base classes defining the rendering seams of the report pipeline.

These interfaces enable:
- Swapping chart capture (headless browser ↔ pre-rendered files ↔ none)
- Swapping output formats (JSON ↔ PDF ↔ Word) without touching the builder
- Keeping ReportDocument construction free of I/O

The builder produces a ReportDocument whose ImagePlaceholder blocks name
charts by identifier. A ChartCapture turns identifiers into image bytes;
a DocumentWriter serializes the document plus whatever images were
captured.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from core.report_document import ReportDocument


class ChartCapture(ABC):
    """
    Abstract base for chart image providers.

    Implementations may return None when a chart is not available; the
    render pipeline then writes the placeholder's fallback text instead.
    Exceptions raised by capture_chart are treated the same way.
    """

    @abstractmethod
    def capture_chart(self, identifier: str) -> Optional[bytes]:
        """
        Capture one chart as image bytes.

        Args:
            identifier: Chart identifier from ImagePlaceholder.identifier

        Returns:
            Encoded image bytes (PNG), or None if unavailable
        """
        pass


class DocumentWriter(ABC):
    """Abstract base for report serializers."""

    @abstractmethod
    def write_document(self, document: ReportDocument, images: Dict[str, bytes]) -> bytes:
        """
        Serialize a report.

        Args:
            document: Report structure
            images: Captured images keyed by chart identifier. Identifiers
                missing from this mapping must be rendered with the
                placeholder's fallback text.

        Returns:
            Serialized document bytes
        """
        pass

    @property
    def media_type(self) -> str:
        return "application/octet-stream"


class StaticChartCapture(ChartCapture):
    """ChartCapture over a fixed mapping of pre-rendered images."""

    def __init__(self, images: Optional[Dict[str, bytes]] = None):
        self._images = dict(images or {})

    def capture_chart(self, identifier: str) -> Optional[bytes]:
        return self._images.get(identifier)
