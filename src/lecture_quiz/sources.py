"""Uploaded files and their conversion into generation sources."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path

from .models import SourceFile
from .slides import extract_slide_text

__all__ = [
    "PDF_MIME",
    "PPTX_MIME",
    "Upload",
    "guess_mime_type",
    "is_pdf",
    "is_slide_deck",
    "read_upload",
    "to_source_file",
]

PDF_MIME = "application/pdf"
PPTX_MIME = (
    "application/vnd.openxmlformats-officedocument.presentationml.presentation"
)

_KNOWN_SUFFIXES = {".pdf": PDF_MIME, ".pptx": PPTX_MIME}


@dataclass(frozen=True)
class Upload:
    """A user-selected file with its declared type and raw content."""

    name: str
    mime_type: str
    data: bytes


def guess_mime_type(name: str) -> str:
    suffix = Path(name).suffix.lower()
    if suffix in _KNOWN_SUFFIXES:
        return _KNOWN_SUFFIXES[suffix]
    guessed, _ = mimetypes.guess_type(name)
    return guessed or "application/octet-stream"


def read_upload(path: Path) -> Upload:
    path = Path(path)
    return Upload(
        name=path.name,
        mime_type=guess_mime_type(path.name),
        data=path.read_bytes(),
    )


def is_pdf(upload: Upload) -> bool:
    return upload.mime_type == PDF_MIME


def is_slide_deck(upload: Upload) -> bool:
    return (
        upload.mime_type == PPTX_MIME
        or upload.name.lower().endswith(".pptx")
    )


def to_source_file(upload: Upload) -> SourceFile:
    """Turn a supported upload into a :class:`SourceFile`.

    Slide decks are text-extracted locally and may raise
    :class:`~lecture_quiz.errors.ExtractionError`; PDFs keep their bytes.
    """

    if is_slide_deck(upload):
        return SourceFile(
            name=upload.name,
            mime_type=PPTX_MIME,
            extracted_text=extract_slide_text(upload.data),
        )
    if is_pdf(upload):
        return SourceFile(
            name=upload.name,
            mime_type=PDF_MIME,
            raw_bytes=upload.data,
        )
    raise ValueError(f"Unsupported file type for {upload.name}")
