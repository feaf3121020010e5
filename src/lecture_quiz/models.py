"""Value types shared by the extraction, generation, scoring and report steps."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from .errors import ConfigError

__all__ = [
    "AnswerSet",
    "AssessmentType",
    "GenerationRequest",
    "Language",
    "OPTION_COUNT",
    "Question",
    "QuestionOutcome",
    "ScoredResult",
    "SourceFile",
]

OPTION_COUNT = 4

AnswerSet = Mapping[int, int]


class AssessmentType(Enum):
    """Short quiz or longer, deeper exam."""

    QUIZ = "quiz"
    EXAM = "exam"

    @property
    def presets(self) -> tuple[int, ...]:
        return _PRESETS[self]

    @property
    def default_count(self) -> int:
        return _DEFAULT_COUNTS[self]

    @classmethod
    def from_value(cls, value: "str | AssessmentType") -> "AssessmentType":
        if isinstance(value, AssessmentType):
            return value
        normalized = str(value).strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        expected = ", ".join(member.value for member in cls)
        raise ConfigError(
            ConfigError.INVALID_SETTING,
            detail=f"unknown assessment type '{value}', expected {expected}",
        )


_PRESETS: dict[AssessmentType, tuple[int, ...]] = {
    AssessmentType.QUIZ: (5, 10, 15, 20),
    AssessmentType.EXAM: (30, 40, 50),
}

_DEFAULT_COUNTS: dict[AssessmentType, int] = {
    AssessmentType.QUIZ: 10,
    AssessmentType.EXAM: 30,
}


class Language(Enum):
    """Language the questions, options and explanations are written in."""

    PRIMARY = "English"
    SECONDARY = "Arabic"

    @property
    def is_rtl(self) -> bool:
        return self is Language.SECONDARY

    @classmethod
    def from_value(cls, value: "str | Language") -> "Language":
        if isinstance(value, Language):
            return value
        normalized = str(value).strip().lower()
        for member in cls:
            if normalized in (member.name.lower(), member.value.lower()):
                return member
        raise ConfigError(
            ConfigError.INVALID_SETTING,
            detail=f"unknown language '{value}'",
        )


@dataclass(frozen=True)
class SourceFile:
    """One uploaded document, ready to be attached to a generation request.

    PDFs keep their bytes (the model ingests them directly); slide decks keep
    only the locally extracted text.
    """

    name: str
    mime_type: str
    raw_bytes: Optional[bytes] = None
    extracted_text: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.raw_bytes is None) == (self.extracted_text is None):
            raise ValueError(
                "SourceFile needs exactly one of raw_bytes or extracted_text"
            )

    @property
    def is_text(self) -> bool:
        return self.extracted_text is not None

    def base64_data(self) -> str:
        if self.raw_bytes is None:
            raise ValueError(f"{self.name} carries extracted text, not bytes")
        return base64.b64encode(self.raw_bytes).decode("ascii")


@dataclass(frozen=True)
class GenerationRequest:
    """Validated parameters for one question generation call."""

    source_files: tuple[SourceFile, ...]
    question_count: int
    language: Language
    assessment_type: AssessmentType

    def __post_init__(self) -> None:
        if not self.source_files:
            raise ConfigError(ConfigError.NO_USABLE_FILES)
        if self.question_count not in self.assessment_type.presets:
            raise ConfigError(
                ConfigError.INVALID_QUESTION_COUNT,
                detail=(
                    f"{self.question_count} not in "
                    f"{list(self.assessment_type.presets)}"
                ),
            )


@dataclass(frozen=True)
class Question:
    """A multiple-choice question with exactly four options."""

    prompt: str
    options: tuple[str, ...]
    correct_option_index: int
    explanation: str

    def option_text(self, index: Optional[int]) -> Optional[str]:
        if index is None or not 0 <= index < len(self.options):
            return None
        return self.options[index]

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_option_index]

    @classmethod
    def from_payload(cls, data: Any) -> "Question":
        """Build a question from the service's JSON object.

        Expected shape: ``{"question": str, "options": [str x4],
        "correctAnswerIndex": int 0-3, "explanation": str}``. Raises
        ``ValueError`` describing the first mismatch.
        """

        if not isinstance(data, dict):
            raise ValueError("question must be an object")
        prompt = data.get("question")
        if not isinstance(prompt, str) or not prompt.strip():
            raise ValueError("question text is required")
        options = data.get("options")
        if not isinstance(options, list) or len(options) != OPTION_COUNT:
            raise ValueError(f"options must be a list of {OPTION_COUNT}")
        if not all(isinstance(opt, str) for opt in options):
            raise ValueError("options must be strings")
        index = data.get("correctAnswerIndex")
        # bool is an int subclass; reject it explicitly.
        if isinstance(index, bool) or not isinstance(index, int):
            raise ValueError("correctAnswerIndex must be an integer")
        if not 0 <= index < OPTION_COUNT:
            raise ValueError("correctAnswerIndex out of range")
        explanation = data.get("explanation", "")
        if not isinstance(explanation, str):
            raise ValueError("explanation must be a string")
        return cls(
            prompt=prompt.strip(),
            options=tuple(opt.strip() for opt in options),
            correct_option_index=index,
            explanation=explanation.strip(),
        )


@dataclass(frozen=True)
class QuestionOutcome:
    """Scoring outcome for a single question."""

    index: int
    question: Question
    selected_index: Optional[int]
    is_correct: bool

    @property
    def skipped(self) -> bool:
        return self.selected_index is None


@dataclass(frozen=True)
class ScoredResult:
    """Immutable result of scoring one quiz attempt."""

    per_question: tuple[QuestionOutcome, ...]
    correct_count: int
    total: int
    percentage: int

    @property
    def answered_count(self) -> int:
        return sum(1 for item in self.per_question if not item.skipped)
