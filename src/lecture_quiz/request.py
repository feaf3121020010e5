"""Assemble a validated generation request from uploads and quiz settings.

The normalizer enforces three rules:

- at most ``MAX_SOURCE_FILES`` uploads per request, checked before any file
  is touched;
- the question count must be one of the presets for the assessment type
  (never coerced);
- only PDFs and PowerPoint decks are used. Other files, and decks that fail
  extraction, are skipped with a per-file warning while the rest proceed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from .errors import ConfigError, ExtractionError
from .models import AssessmentType, GenerationRequest, Language, SourceFile
from .sources import Upload, is_pdf, is_slide_deck, to_source_file

__all__ = [
    "MAX_SOURCE_FILES",
    "FileWarning",
    "NormalizedRequest",
    "default_question_count",
    "normalize_request",
    "presets_for",
    "validate_question_count",
]

MAX_SOURCE_FILES = 10
UNSUPPORTED_TYPE = "unsupported file type"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileWarning:
    """A file left out of the request and why."""

    name: str
    reason: str


@dataclass(frozen=True)
class NormalizedRequest:
    request: GenerationRequest
    warnings: tuple[FileWarning, ...]


def presets_for(assessment_type: "AssessmentType | str") -> tuple[int, ...]:
    return AssessmentType.from_value(assessment_type).presets


def default_question_count(assessment_type: "AssessmentType | str") -> int:
    """Count preselected when the user switches to ``assessment_type``."""
    return AssessmentType.from_value(assessment_type).default_count


def validate_question_count(
    assessment_type: "AssessmentType | str", question_count: int
) -> int:
    kind = AssessmentType.from_value(assessment_type)
    if isinstance(question_count, bool) or question_count not in kind.presets:
        raise ConfigError(
            ConfigError.INVALID_QUESTION_COUNT,
            detail=(
                f"{question_count!r} is not one of {list(kind.presets)} "
                f"for {kind.value}"
            ),
        )
    return question_count


def normalize_request(
    uploads: Sequence[Upload],
    *,
    assessment_type: "AssessmentType | str",
    language: "Language | str",
    question_count: Optional[int] = None,
) -> NormalizedRequest:
    """Validate settings, convert uploads and build a generation request.

    Sources keep the order of ``uploads``. Raises :class:`ConfigError` for
    too many files, an invalid question count, or when no upload survives.
    """

    if len(uploads) > MAX_SOURCE_FILES:
        raise ConfigError(
            ConfigError.TOO_MANY_FILES,
            detail=f"{len(uploads)} given, at most {MAX_SOURCE_FILES} allowed",
        )

    kind = AssessmentType.from_value(assessment_type)
    lang = Language.from_value(language)
    count = (
        kind.default_count
        if question_count is None
        else validate_question_count(kind, question_count)
    )

    sources: list[SourceFile] = []
    warnings: list[FileWarning] = []
    for upload in uploads:
        if not (is_pdf(upload) or is_slide_deck(upload)):
            warnings.append(FileWarning(upload.name, UNSUPPORTED_TYPE))
            logger.warning(
                "Skipped unsupported upload",
                extra={"file": upload.name, "mime_type": upload.mime_type},
            )
            continue
        try:
            sources.append(to_source_file(upload))
        except ExtractionError as exc:
            warnings.append(FileWarning(upload.name, exc.reason))
            logger.warning(
                "Skipped slide deck that could not be extracted",
                extra={"file": upload.name, "reason": exc.reason},
            )

    if not sources:
        raise ConfigError(
            ConfigError.NO_USABLE_FILES,
            detail=f"{len(warnings)} file(s) skipped",
        )

    request = GenerationRequest(
        source_files=tuple(sources),
        question_count=count,
        language=lang,
        assessment_type=kind,
    )
    logger.info(
        "Prepared generation request",
        extra={
            "files": [source.name for source in sources],
            "skipped": len(warnings),
            "assessment_type": kind.value,
            "question_count": count,
            "language": lang.value,
        },
    )
    return NormalizedRequest(request=request, warnings=tuple(warnings))
