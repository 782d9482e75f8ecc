"""
JSON document writer.

Serializes a ReportDocument to UTF-8 JSON. Captured chart images are
embedded base64-encoded under "images"; identifiers with no image are
listed under "missing_images" so a downstream renderer can print the
placeholder fallback text.
"""

import base64
import json
from typing import Dict

from core.interfaces import DocumentWriter
from core.report_document import ReportDocument


class JsonDocumentWriter(DocumentWriter):
    def __init__(self, indent: int = 2):
        self.indent = indent

    @property
    def media_type(self) -> str:
        return "application/json"

    def write_document(self, document: ReportDocument, images: Dict[str, bytes]) -> bytes:
        identifiers = document.image_identifiers()
        payload = document.to_dict()
        payload["images"] = {
            ident: base64.b64encode(images[ident]).decode("ascii")
            for ident in identifiers
            if ident in images
        }
        payload["missing_images"] = [ident for ident in identifiers if ident not in images]
        return json.dumps(payload, indent=self.indent, ensure_ascii=False).encode("utf-8")
