"""Rich-powered quiz session for generated multiple-choice questions.

The loop renders one question at a time, reads commands from an input
provider and records the selected option index per question. Submitting
with unanswered questions asks for confirmation first. Submitting then
scores the attempt through :func:`lecture_quiz.scoring.score_quiz` and prints
a summary; quitting returns the partial answers unscored.
"""

from __future__ import annotations

import string
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Callable, Literal, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import Question, ScoredResult
from .scoring import score_quiz

InputProvider = Callable[[], str]
ExitAction = Literal["submitted", "quit", "empty"]

OPTION_KEYS = string.ascii_uppercase


@dataclass(frozen=True)
class SessionCommand:
    """Normalized user command parsed from console input."""

    type: Literal["next", "prev", "submit", "quit", "select"]
    choice: str | None = None


@dataclass(frozen=True)
class QuizSessionResult:
    """Return value from ``run_quiz_session``."""

    answers: dict[int, int]
    result: Optional[ScoredResult]
    exit_action: ExitAction


@dataclass
class QuizSessionState:
    """Mutable state shared by the Rich UI loop."""

    questions: list[Question]
    index: int = 0
    answers: dict[int, int] = field(default_factory=dict)

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current(self) -> Question:
        return self.questions[self.index]

    def answered_count(self) -> int:
        return len(self.answers)

    def option_keys(self) -> list[str]:
        return list(OPTION_KEYS[: len(self.current.options)])

    def select(self, key: str) -> bool:
        key = key.strip().upper()[:1]
        keys = self.option_keys()
        if key not in keys:
            return False
        self.answers[self.index] = keys.index(key)
        return True

    def next(self) -> None:
        if self.index + 1 < self.total_questions:
            self.index += 1

    def previous(self) -> None:
        if self.index > 0:
            self.index -= 1

    def selected_index(self) -> int | None:
        return self.answers.get(self.index)


def parse_session_command(raw: str | None) -> SessionCommand | None:
    """Parse raw user input into a structured command."""

    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    lowered = text.lower()
    if lowered in {"n", "next"}:
        return SessionCommand("next")
    if lowered in {"p", "prev", "previous"}:
        return SessionCommand("prev")
    if lowered in {"submit", "s"}:
        return SessionCommand("submit")
    if lowered in {"quit", "q", "exit"}:
        return SessionCommand("quit")
    key = text[0].upper()
    if key.isalpha():
        return SessionCommand("select", key)
    return None


def run_quiz_session(
    questions: Sequence[Question],
    console: Console,
    input_provider: InputProvider,
    *,
    show_explanations: bool = True,
) -> QuizSessionResult:
    """Run an interactive quiz session using Rich-rendered prompts."""

    state = QuizSessionState(list(questions))
    if not state.questions:
        console.print(
            Panel(
                "No questions to answer.",
                title="Quiz Session",
                border_style="yellow",
            )
        )
        return QuizSessionResult({}, None, "empty")

    exit_action: ExitAction = "quit"
    while True:
        _render_question(console, state)
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            exit_action = "quit"
            break
        command = parse_session_command(raw)
        if command is None:
            console.print("[red]Unrecognized command. Try again.[/]")
            continue
        exit_candidate = _apply_command(
            command, state, console, input_provider
        )
        if exit_candidate:
            exit_action = exit_candidate
            break

    answers = dict(state.answers)
    if exit_action != "submitted":
        return QuizSessionResult(answers, None, exit_action)

    result = score_quiz(state.questions, answers)
    _render_summary(console, result, show_explanations=show_explanations)
    return QuizSessionResult(answers, result, exit_action)


def _apply_command(
    command: SessionCommand,
    state: QuizSessionState,
    console: Console,
    input_provider: InputProvider,
) -> ExitAction | None:
    if command.type == "select" and command.choice:
        if state.select(command.choice):
            console.print(f"Selected [bold]{command.choice}[/].")
        else:
            console.print(
                "[red]'%s' is not a valid choice for this question.[/red]"
                % command.choice,
            )
        return None
    if command.type == "next":
        state.next()
        return None
    if command.type == "prev":
        state.previous()
        return None
    if command.type == "quit":
        console.print("\n[bold yellow]Ending session without submission.[/]")
        return "quit"
    if command.type == "submit":
        if _confirm_submit(state, console, input_provider):
            return "submitted"
        return None
    return None


def _confirm_submit(
    state: QuizSessionState,
    console: Console,
    input_provider: InputProvider,
) -> bool:
    answered = state.answered_count()
    if answered >= state.total_questions:
        return True
    console.print(
        f"[bold yellow]Only {answered}/{state.total_questions} questions "
        "answered.[/] Submit anyway? \\[y/N]"
    )
    try:
        reply = input_provider()
    except (EOFError, KeyboardInterrupt, StopIteration):
        return False
    if reply.strip().lower() in {"y", "yes"}:
        return True
    console.print("Returning to the quiz.")
    return False


def _render_question(console: Console, state: QuizSessionState) -> None:
    question = state.current
    header = Text.assemble(
        (f"Question {state.index + 1}", "bold cyan"),
        (f" / {state.total_questions}", "dim"),
    )
    console.print()
    console.rule(header)
    console.print(Text(question.prompt, style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Option")

    selected = state.selected_index()
    for position, key in enumerate(state.option_keys()):
        is_selected = position == selected
        row_text = Text("• " if is_selected else "  ")
        option_text = Text(question.options[position])
        if is_selected:
            option_text.stylize("bold green")
        row_text += option_text
        table.add_row(key, row_text)

    console.print(table)
    key_hint = ", ".join(state.option_keys())
    console.print(
        Text(
            f"Answered {state.answered_count()}/{state.total_questions} | "
            f"Commands: options [{key_hint}], n (next), p (prev), submit, quit",
            style="dim",
        )
    )


def _option_label(question: Question, index: int | None) -> str:
    if question.option_text(index) is None:
        return "-"
    return OPTION_KEYS[index]


def _render_summary(
    console: Console,
    result: ScoredResult,
    *,
    show_explanations: bool,
) -> None:
    console.print()
    console.rule(Text("Quiz Summary", style="bold magenta"))

    overview = Table(
        show_header=False,
        box=box.MINIMAL_DOUBLE_HEAD,
        expand=False,
    )
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Total questions", str(result.total))
    overview.add_row("Answered", str(result.answered_count))
    overview.add_row("Correct", str(result.correct_count))
    overview.add_row("Score", f"{result.percentage}%")
    console.print(overview)

    responses = Table(title="Responses", box=box.SIMPLE, expand=True)
    responses.add_column("#", justify="right")
    responses.add_column("Question", overflow="fold")
    responses.add_column("Your answer")
    responses.add_column("Correct answer")
    responses.add_column("Result", justify="center")
    for outcome in result.per_question:
        question = outcome.question
        responses.add_row(
            str(outcome.index + 1),
            question.prompt,
            _option_label(question, outcome.selected_index),
            OPTION_KEYS[question.correct_option_index],
            "✅" if outcome.is_correct else "❌",
        )
    console.print(responses)

    if not show_explanations:
        return
    for outcome in result.per_question:
        if not outcome.question.explanation:
            continue
        console.print(
            Panel(
                outcome.question.explanation,
                title=f"Explanation: question {outcome.index + 1}",
                border_style="green" if outcome.is_correct else "red",
            )
        )
