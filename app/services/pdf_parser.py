"""PDF text extraction for uploaded documents."""

import io
import logging
from typing import Optional

from pypdf import PdfReader
from pypdf.errors import PdfReadError

logger = logging.getLogger(__name__)


def extract_text_from_pdf(pdf_content: bytes, max_pages: Optional[int] = None) -> str:
    """
    Extract the text layer of a PDF.

    Args:
        pdf_content: Raw PDF bytes
        max_pages: Only read this many leading pages when set

    Returns:
        Page texts joined by blank lines

    Raises:
        ValueError: If the file is not a readable PDF or has no text layer
    """
    try:
        reader = PdfReader(io.BytesIO(pdf_content))
        pages = reader.pages if max_pages is None else reader.pages[:max_pages]
        texts = [(page.extract_text() or "").strip() for page in pages]
    except PdfReadError as e:
        raise ValueError(f"Failed to parse PDF: {e}")

    texts = [t for t in texts if t]
    if not texts:
        raise ValueError("No text could be extracted from PDF")

    full_text = "\n\n".join(texts)
    logger.info(f"Extracted {len(full_text)} characters from {len(texts)} page(s)")
    return full_text
