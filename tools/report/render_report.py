"""
Report rendering orchestration.

Captures every chart named by the document's image placeholders, then
hands the complete document plus the captured images to a DocumentWriter.
A chart that cannot be captured (None or an exception) is logged and left
out of the image map; the writer prints the placeholder fallback text for
it. A failed capture never aborts the report.
"""

import logging
from typing import Dict, Optional

from core.interfaces import ChartCapture, DocumentWriter
from core.report_document import ReportDocument

logger = logging.getLogger(__name__)


def capture_images(document: ReportDocument, capture: Optional[ChartCapture]) -> Dict[str, bytes]:
    """Image bytes for every placeholder that could be captured."""
    images: Dict[str, bytes] = {}
    if capture is None:
        logger.warning("No chart capture configured; all charts rendered as placeholders")
        return images

    for identifier in document.image_identifiers():
        try:
            image = capture.capture_chart(identifier)
        except Exception as e:
            logger.warning(f"Chart capture failed for '{identifier}': {e}")
            continue
        if image is None:
            logger.warning(f"Chart '{identifier}' not available; using placeholder text")
            continue
        images[identifier] = image
    return images


def render_report(
    document: ReportDocument,
    capture: Optional[ChartCapture],
    writer: DocumentWriter,
) -> bytes:
    """
    Render a report document.

    Args:
        document: Report structure (not modified)
        capture: Chart provider, or None to render without images
        writer: Output backend (JSON, PDF, Word, ...)

    Returns:
        Serialized document bytes from the writer
    """
    images = capture_images(document, capture)
    missing = len(document.image_identifiers()) - len(images)
    logger.info(f"Rendering report: {len(images)} charts captured, {missing} missing")
    return writer.write_document(document, images)
