from __future__ import annotations

"""DOCX text extraction for resume uploads."""

from io import BytesIO
from zipfile import BadZipFile

from docx import Document as DocxDocument
from docx.opc.exceptions import PackageNotFoundError

from resume_chat.loaders.text import clean_extracted_text


class DocxLoaderError(RuntimeError):
    """Raised when DOCX loading fails."""
    pass


def extract_docx_text(data: bytes) -> str:
    """Extract cleaned text from DOCX bytes, one paragraph per block."""
    try:
        doc = DocxDocument(BytesIO(data))
    except (BadZipFile, PackageNotFoundError, KeyError, ValueError) as exc:
        raise DocxLoaderError(
            "Failed to parse DOCX file. Please ensure it is a valid Word document."
        ) from exc

    parts: list[str] = []
    for paragraph in doc.paragraphs:
        text = paragraph.text.strip()
        if text:
            parts.append(text)

    for table in doc.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                parts.append(" | ".join(cells))

    return clean_extracted_text("\n\n".join(parts))
