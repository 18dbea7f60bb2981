from __future__ import annotations

"""Resume upload validation and text extraction dispatch."""

from dataclasses import dataclass

from resume_chat.loaders.docx import extract_docx_text
from resume_chat.loaders.pdf import extract_pdf_text

PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
ALLOWED_FILE_TYPES = (PDF_MIME_TYPE, DOCX_MIME_TYPE)
MAX_FILE_SIZE = 5 * 1024 * 1024
MIN_RESUME_TEXT_CHARS = 100

_EXTENSION_TYPES = {"pdf": PDF_MIME_TYPE, "docx": DOCX_MIME_TYPE}


class UnsupportedFileTypeError(ValueError):
    """Raised when extraction is requested for a non-resume file type."""
    pass


@dataclass(frozen=True)
class FileValidation:
    """Outcome of validating an uploaded resume file."""
    valid: bool
    error: str | None = None


def get_file_extension(filename: str) -> str:
    """Return the lower-case extension of a filename, or an empty string."""
    parts = filename.split(".")
    if len(parts) <= 1:
        return ""
    return parts[-1].lower()


def resolve_content_type(filename: str | None, content_type: str | None) -> str | None:
    """Return the declared MIME type, inferring it from the extension when generic."""
    declared = (content_type or "").split(";", 1)[0].strip().lower()
    if declared and declared != "application/octet-stream":
        return declared
    if not filename:
        return declared or None
    return _EXTENSION_TYPES.get(get_file_extension(filename), declared or None)


def is_valid_file_type(content_type: str | None) -> bool:
    """Return True for PDF and DOCX MIME types."""
    return content_type in ALLOWED_FILE_TYPES


def is_valid_file_size(size: int, max_bytes: int = MAX_FILE_SIZE) -> bool:
    """Return True when the size is within the upload limit."""
    return size <= max_bytes


def validate_resume_file(
    filename: str | None,
    content_type: str | None,
    size: int,
    max_bytes: int = MAX_FILE_SIZE,
) -> FileValidation:
    """Validate an uploaded resume by name, type and size."""
    if not filename:
        return FileValidation(valid=False, error="No file provided")
    if not is_valid_file_type(content_type):
        return FileValidation(
            valid=False, error="Invalid file type. Please upload a PDF or DOCX file."
        )
    if not is_valid_file_size(size, max_bytes):
        return FileValidation(
            valid=False,
            error=f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB.",
        )
    return FileValidation(valid=True)


def extract_resume_text(data: bytes, content_type: str) -> str:
    """Extract cleaned text from resume bytes based on MIME type."""
    if content_type == PDF_MIME_TYPE:
        return extract_pdf_text(data)
    if content_type == DOCX_MIME_TYPE:
        return extract_docx_text(data)
    raise UnsupportedFileTypeError(f"Unsupported resume type: {content_type}")
