"""Question generation through the OpenAI chat completions API.

One request per quiz attempt, no retries: any failure surfaces as a
:class:`~lecture_quiz.errors.GenerationError` and the caller decides whether
to start over.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

import openai

from .core import load_client
from .errors import GenerationError
from .models import AssessmentType, GenerationRequest, Question
from .settings import DEFAULT_MODEL, GenerationSettings

__all__ = [
    "build_messages",
    "build_payload",
    "build_prompt",
    "generate_questions",
    "parse_questions",
]

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert university professor and exam creator. "
    "You answer with raw JSON only."
)

_TITLES = {
    AssessmentType.QUIZ: "Quick Quiz",
    AssessmentType.EXAM: "Comprehensive Final Exam",
}

_DEPTH = {
    AssessmentType.QUIZ: (
        "Create questions that test key concepts and basic understanding of "
        "the material."
    ),
    AssessmentType.EXAM: (
        "Deeply analyze all provided documents. Create high-level questions "
        "that test critical thinking, synthesis of concepts across files, and "
        "detailed understanding."
    ),
}

_SCHEMA_LINE = (
    '[{"question": str, "options": [str, str, str, str], '
    '"correctAnswerIndex": int (0-3), "explanation": str}]'
)


def build_payload(request: GenerationRequest) -> Dict[str, Any]:
    """Return the JSON body describing ``request`` on the wire."""

    files = [
        {
            "name": source.name,
            "mimeType": source.mime_type,
            "base64OrText": (
                source.extracted_text
                if source.is_text
                else source.base64_data()
            ),
        }
        for source in request.source_files
    ]
    return {
        "files": files,
        "config": {
            "assessmentType": request.assessment_type.value,
            "questionCount": request.question_count,
            "language": request.language.value,
        },
    }


def build_prompt(request: GenerationRequest) -> str:
    kind = request.assessment_type
    count = len(request.source_files)
    return "\n".join(
        [
            f"Create a {_TITLES[kind]} based strictly on the attached "
            "document(s) content.",
            "",
            "Context:",
            f"- The user has provided {count} source file(s).",
            "- You MUST extract and synthesize information from ALL provided "
            "files.",
            "- Cover topics distributed across all provided materials, not "
            "just the first one.",
            "",
            "Configuration:",
            f"- Assessment Type: {kind.value}",
            f"- Number of Questions: {request.question_count}",
            f"- Language: {request.language.value} (questions, options and "
            "explanations must all be in this language).",
            "- Difficulty: University level.",
            "",
            "Instruction:",
            _DEPTH[kind],
            "",
            f"Format: Return a raw JSON array shaped like {_SCHEMA_LINE}.",
            "",
            "Rules:",
            "- Exactly 4 options per question.",
            "- correctAnswerIndex must point at the correct option.",
            "- Provide a helpful explanation for learning purposes.",
        ]
    )


def build_messages(request: GenerationRequest) -> List[Dict[str, Any]]:
    """Chat messages: the prompt, then one content part per source file."""

    parts: List[Dict[str, Any]] = [
        {"type": "text", "text": build_prompt(request)}
    ]
    for source in request.source_files:
        if source.is_text:
            parts.append(
                {
                    "type": "text",
                    "text": (
                        f"[Source: {source.name}] Content:\n"
                        f"{source.extracted_text}"
                    ),
                }
            )
        else:
            parts.append(
                {
                    "type": "file",
                    "file": {
                        "filename": source.name,
                        "file_data": (
                            f"data:{source.mime_type};base64,"
                            f"{source.base64_data()}"
                        ),
                    },
                }
            )
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": parts},
    ]


def parse_questions(content: str) -> List[Question]:
    """Parse the model's reply into validated questions.

    The reply must be a JSON array (a fenced ```json block is accepted) or an
    ``{"error": ...}`` object. Items that do not match the question shape are
    skipped; an array with no valid item is a malformed response.
    """

    if not content or not content.strip():
        raise GenerationError(GenerationError.MISSING_BODY)
    fenced = re.search(r"```(?:json)?\s*(.+?)```", content, re.DOTALL)
    raw = fenced.group(1) if fenced else content
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise GenerationError(
            GenerationError.MALFORMED_RESPONSE, detail=str(exc)
        ) from exc

    if isinstance(data, dict) and "error" in data:
        raise GenerationError(
            GenerationError.SERVICE_ERROR, detail=str(data["error"])
        )
    if not isinstance(data, list):
        raise GenerationError(
            GenerationError.MALFORMED_RESPONSE,
            detail=f"expected a JSON array, got {type(data).__name__}",
        )

    questions: List[Question] = []
    for position, item in enumerate(data):
        try:
            questions.append(Question.from_payload(item))
        except ValueError as exc:
            logger.warning(
                "Dropped malformed question",
                extra={"position": position, "problem": str(exc)},
            )
    if not questions:
        raise GenerationError(
            GenerationError.MALFORMED_RESPONSE,
            detail="no valid questions in response",
        )
    return questions


def generate_questions(
    request: GenerationRequest,
    *,
    client: Optional[Any] = None,
    settings: Optional[GenerationSettings] = None,
) -> List[Question]:
    """Ask the model for ``request.question_count`` questions."""

    settings = settings or GenerationSettings(
        model=DEFAULT_MODEL, temperature=0.4, max_tokens=8192
    )
    resolved = client if client is not None else _load_client()

    params: Dict[str, Any] = {
        "model": settings.model,
        "messages": build_messages(request),
        "temperature": settings.temperature,
    }
    if "gpt-5" in settings.model:
        params["max_completion_tokens"] = settings.max_tokens
    else:
        params["max_tokens"] = settings.max_tokens

    logger.info(
        "Requesting questions",
        extra={
            "model": settings.model,
            "question_count": request.question_count,
            "files": len(request.source_files),
        },
    )
    try:
        response = resolved.chat.completions.create(**params)
    except (openai.APIConnectionError, openai.APITimeoutError) as exc:
        raise GenerationError(
            GenerationError.UNREACHABLE, detail=str(exc)
        ) from exc
    except openai.APIStatusError as exc:
        raise GenerationError(
            GenerationError.SERVICE_ERROR,
            detail=f"HTTP {exc.status_code}: {exc.message}",
        ) from exc
    except openai.OpenAIError as exc:
        raise GenerationError(
            GenerationError.SERVICE_ERROR, detail=str(exc)
        ) from exc

    questions = parse_questions(_response_content(response))
    if len(questions) != request.question_count:
        logger.warning(
            "Question count differs from request",
            extra={
                "requested": request.question_count,
                "received": len(questions),
            },
        )
    return questions


def _load_client() -> Any:
    try:
        return load_client()
    except RuntimeError as exc:
        raise GenerationError(
            GenerationError.CLIENT_UNAVAILABLE, detail=str(exc)
        ) from exc


def _response_content(response: Any) -> str:
    choices = getattr(response, "choices", None) or []
    if not choices:
        raise GenerationError(GenerationError.MISSING_BODY)
    content = getattr(choices[0].message, "content", None)
    if not content:
        raise GenerationError(GenerationError.MISSING_BODY)
    return content.strip()
