from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import (  # noqa: E402
    ChatClientStub,
    CSSStub,
    HTMLStub,
    WorkspaceBuilder,
)
from lecture_quiz import report as report_mod  # noqa: E402
from lecture_quiz.core import release_logger  # noqa: E402
from lecture_quiz.models import Question  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    """Keep workspace, config and API key lookups inside the test tmp dir."""

    for key in list(os.environ):
        if key.startswith("LECTURE_QUIZ_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("LECTURE_QUIZ_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    yield
    package_logger = logging.getLogger("lecture_quiz")
    release_logger(package_logger)
    package_logger.propagate = True


@pytest.fixture(autouse=True)
def _clear_pdf_calls() -> Iterator[None]:
    HTMLStub.pop_calls()
    yield
    HTMLStub.pop_calls()


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Helper bound to a materials folder under pytest's tmp directory."""

    return WorkspaceBuilder(tmp_path / "materials")


@pytest.fixture
def pdf_renderer(monkeypatch: pytest.MonkeyPatch) -> type[HTMLStub]:
    """Route report rendering through the recording HTML/CSS stand-ins."""

    monkeypatch.setattr(
        report_mod, "_load_weasyprint", lambda: (HTMLStub, CSSStub)
    )
    return HTMLStub


@pytest.fixture
def chat_client() -> ChatClientStub:
    return ChatClientStub()


@pytest.fixture
def sample_questions() -> list[Question]:
    return [
        Question(
            prompt=f"Question {number}?",
            options=(
                f"q{number} option A",
                f"q{number} option B",
                f"q{number} option C",
                f"q{number} option D",
            ),
            correct_option_index=correct,
            explanation=f"Because of reason {number}.",
        )
        for number, correct in enumerate((0, 1, 2, 3), start=1)
    ]
