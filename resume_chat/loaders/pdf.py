from __future__ import annotations

"""PDF text extraction for resume uploads."""

import fitz

from resume_chat.loaders.text import clean_extracted_text


class PDFLoaderError(RuntimeError):
    """Raised when PDF loading fails."""
    pass


def extract_pdf_text(data: bytes) -> str:
    """Extract cleaned text from PDF bytes, one paragraph break per page."""
    try:
        reader = fitz.open(stream=data, filetype="pdf")
    except (RuntimeError, ValueError) as exc:
        raise PDFLoaderError(
            "Failed to parse PDF file. Please ensure it is a valid PDF."
        ) from exc
    try:
        pages = [page.get_text() or "" for page in reader]
    finally:
        reader.close()
    return clean_extracted_text("\n\n".join(pages))
