from __future__ import annotations

import io
import logging

from pdfminer.high_level import extract_text
from pdfminer.pdfparser import PDFSyntaxError

from src.services.errors import DocumentExtractionError

logger = logging.getLogger(__name__)


def extract_pdf_text(data: bytes) -> str:
    """Extract plain text from raw PDF bytes."""
    try:
        text = extract_text(io.BytesIO(data)) or ""
    except PDFSyntaxError as syntax_error:
        raise DocumentExtractionError(f"Unable to read PDF document: {syntax_error}") from syntax_error

    logger.debug("Extracted %d characters from PDF (%d bytes)", len(text), len(data))
    return text.strip()
