"""Score a completed quiz attempt against its answer key."""

from __future__ import annotations

from typing import Sequence

from .errors import ScoringError
from .models import AnswerSet, Question, QuestionOutcome, ScoredResult

__all__ = ["percentage_of", "score_quiz"]


def percentage_of(correct: int, total: int) -> int:
    """``correct / total`` as a whole percentage, rounding halves up."""
    if total <= 0:
        raise ScoringError(ScoringError.EMPTY_QUIZ)
    # floor((200 * c + t) / (2 * t)) == floor(100 * c / t + 0.5), exactly.
    return (200 * correct + total) // (2 * total)


def score_quiz(questions: Sequence[Question], answers: AnswerSet) -> ScoredResult:
    """Compare ``answers`` with each question's correct option.

    Unanswered questions count as incorrect. Answers keyed outside the
    question range are ignored. The result depends only on the mapping's
    contents, never on its insertion order.
    """

    if not questions:
        raise ScoringError(ScoringError.EMPTY_QUIZ)

    outcomes = []
    for index, question in enumerate(questions):
        selected = answers.get(index)
        outcomes.append(
            QuestionOutcome(
                index=index,
                question=question,
                selected_index=selected,
                is_correct=(
                    selected is not None
                    and selected == question.correct_option_index
                ),
            )
        )

    correct = sum(1 for outcome in outcomes if outcome.is_correct)
    total = len(outcomes)
    return ScoredResult(
        per_question=tuple(outcomes),
        correct_count=correct,
        total=total,
        percentage=percentage_of(correct, total),
    )
