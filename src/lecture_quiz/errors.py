"""Error taxonomy for the lecture-quiz workflow.

Every error carries a short machine-friendly ``reason`` so the CLI can report
it and tests can assert on it without matching full messages. All of them are
recoverable at the command boundary: the run stops, the user sees the reason,
and nothing else in the process is affected.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "LectureQuizError",
    "ExtractionError",
    "ConfigError",
    "ScoringError",
    "GenerationError",
]


class LectureQuizError(RuntimeError):
    """Base class for lecture-quiz failures."""

    def __init__(self, reason: str, *, detail: Optional[str] = None) -> None:
        message = f"{reason}: {detail}" if detail else reason
        super().__init__(message)
        self.reason = reason
        self.detail = detail


class ExtractionError(LectureQuizError):
    """Raised when a slide deck cannot be turned into text."""

    UNREADABLE_ARCHIVE = "unreadable archive"
    NO_TEXT_FOUND = "no text found"


class ConfigError(LectureQuizError):
    """Raised when the generation request cannot be assembled."""

    TOO_MANY_FILES = "too many files"
    INVALID_QUESTION_COUNT = "invalid question count for assessment type"
    NO_USABLE_FILES = "no usable source files"
    INVALID_SETTING = "invalid setting"


class ScoringError(LectureQuizError):
    """Raised when a quiz attempt cannot be scored."""

    EMPTY_QUIZ = "empty quiz"


class GenerationError(LectureQuizError):
    """Raised when the question generation service call fails."""

    CLIENT_UNAVAILABLE = "client unavailable"
    UNREACHABLE = "external service unreachable"
    SERVICE_ERROR = "service returned an error"
    MALFORMED_RESPONSE = "malformed response"
    MISSING_BODY = "missing response body"
