"""Rendered artifacts and format detection by magic number."""

from dataclasses import dataclass
from functools import cached_property
from io import BytesIO
from typing import Optional

from PyPDF2 import PdfReader

PDF = "pdf"
PNG = "png"
UNKNOWN = "unknown"

MAGIC_NUMBERS = {
    b"%PDF": PDF,
    b"\x89PNG": PNG,
}

MEDIA_TYPES = {
    PDF: "application/pdf",
    PNG: "image/png",
    UNKNOWN: "application/octet-stream",
}


def classify_artifact(data: bytes) -> str:
    """
    Classify a binary payload by its first four bytes.

    Returns:
        'pdf', 'png' or 'unknown' (never raises)
    """
    return MAGIC_NUMBERS.get(bytes(data[:4]), UNKNOWN)


def page_count(data: bytes) -> Optional[int]:
    """Get page count from PDF bytes, or None if unreadable."""
    try:
        return len(PdfReader(BytesIO(data)).pages)
    except Exception:
        return None


@dataclass(frozen=True)
class Artifact:
    """
    Binary output of a successful render.

    Attributes:
        content: Raw bytes as returned by the backend
        format: 'pdf', 'png' or 'unknown'
        backend: Name of the backend that produced it
    """

    content: bytes
    format: str
    backend: str

    @classmethod
    def from_bytes(cls, content: bytes, backend: str) -> "Artifact":
        return cls(content=content, format=classify_artifact(content), backend=backend)

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def media_type(self) -> str:
        return MEDIA_TYPES[self.format]

    @cached_property
    def page_count(self) -> Optional[int]:
        """Number of pages for PDF artifacts, None otherwise."""
        return page_count(self.content) if self.format == PDF else None
