from __future__ import annotations

import re
from datetime import date, datetime

import pytest

from lecture_quiz import report as report_mod
from lecture_quiz.errors import ConfigError
from lecture_quiz.models import Language, Question
from lecture_quiz.scoring import score_quiz


@pytest.fixture
def scored(sample_questions):
    # q1 right, q2 wrong, q3 skipped, q4 right.
    return score_quiz(sample_questions, {0: 0, 1: 3, 3: 3})


def test_blocks_follow_question_order_without_gaps(scored):
    result = report_mod.assemble_report(
        scored, generated_on=date(2024, 5, 1)
    )

    assert [block.number for block in result.blocks] == [1, 2, 3, 4]
    assert result.header == report_mod.ReportHeader(
        correct_count=2,
        total=4,
        percentage=50,
        generated_on=date(2024, 5, 1),
    )


def test_block_contents_for_correct_wrong_and_skipped(scored):
    first, second, third, _ = report_mod.assemble_report(
        scored, generated_on=date(2024, 5, 1)
    ).blocks

    assert first.is_correct
    assert first.selected_text == "q1 option A"
    assert first.correct_text is None

    assert not second.is_correct
    assert second.selected_text == "q2 option D"
    assert second.correct_text == "q2 option B"
    assert second.explanation == "Because of reason 2."

    assert third.skipped
    assert third.selected_text is None
    assert third.correct_text == "q3 option C"


def test_out_of_range_selection_is_reported_as_skipped():
    question = Question(
        prompt="Pick one",
        options=("w", "x", "y", "z"),
        correct_option_index=2,
        explanation="",
    )
    result = score_quiz([question], {0: 7})

    (block,) = report_mod.assemble_report(result).blocks

    assert block.skipped
    assert block.correct_text == "y"


def test_html_lists_status_and_skipped_marker(scored):
    report = report_mod.assemble_report(scored, generated_on=date(2024, 5, 1))

    html = report_mod.render_report_html(report)

    assert 'dir="ltr"' in html
    assert "Quiz Results Report" in html
    assert "2 / 4" in html and "(50%)" in html
    assert "2024-05-01" in html
    assert len(re.findall(r"\bCORRECT\b", html)) == 2
    assert len(re.findall(r"\bINCORRECT\b", html)) == 2
    assert "Skipped" in html
    assert html.index("Question 1?") < html.index("Question 4?")


def test_html_escapes_question_text():
    question = Question(
        prompt="Is <b>bold</b> & safe?",
        options=("a", "b", "c", "d"),
        correct_option_index=0,
        explanation="",
    )
    report = report_mod.assemble_report(score_quiz([question], {0: 0}))

    html = report_mod.render_report_html(report)

    assert "Is &lt;b&gt;bold&lt;/b&gt; &amp; safe?" in html


def test_arabic_report_is_right_to_left(scored):
    report = report_mod.assemble_report(
        scored, generated_on=date(2024, 5, 1), language=Language.SECONDARY
    )

    html = report_mod.render_report_html(report)

    assert 'dir="rtl"' in html
    assert 'lang="ar"' in html
    assert report_mod.LABELS[Language.SECONDARY]["title"] in html


def test_page_css_defaults():
    css = report_mod.build_page_css()

    assert "size: A4 portrait;" in css
    assert "margin: 2cm;" in css


def test_page_css_accepts_margin_shorthand():
    css = report_mod.build_page_css(
        paper_size="Letter", orientation="landscape", margin="1in 0.5in"
    )

    assert "size: Letter landscape;" in css
    assert "margin: 1in 0.5in;" in css


@pytest.mark.parametrize(
    "kwargs",
    [
        {"paper_size": "tabloid"},
        {"orientation": "sideways"},
        {"margin": "2px"},
        {"margin": "1cm 1cm 1cm 1cm 1cm"},
        {"margin": ""},
    ],
)
def test_page_css_rejects_invalid_settings(kwargs):
    with pytest.raises(ConfigError) as excinfo:
        report_mod.build_page_css(**kwargs)

    assert excinfo.value.reason == ConfigError.INVALID_SETTING


def test_write_report_pdf_renders_through_weasyprint(
    scored, tmp_path, pdf_renderer
):
    report = report_mod.assemble_report(scored, generated_on=date(2024, 5, 1))
    target = tmp_path / "out" / "results.pdf"

    written = report_mod.write_report_pdf(
        report, target, page_css="@page { size: A5; }"
    )

    assert written == target
    assert target.exists()
    (call,) = pdf_renderer.pop_calls()
    assert call.target == target
    assert call.base_url == str(target.parent)
    assert call.stylesheets[0].string == "@page { size: A5; }"
    assert "Quiz Results Report" in call.html


def test_missing_weasyprint_raises_runtime_error(monkeypatch, scored, tmp_path):
    def _missing():
        raise RuntimeError("WeasyPrint is required for PDF reports.")

    monkeypatch.setattr(report_mod, "_load_weasyprint", _missing)
    report = report_mod.assemble_report(scored)

    with pytest.raises(RuntimeError):
        report_mod.write_report_pdf(report, tmp_path / "x.pdf")


def test_default_report_name_is_timestamped():
    name = report_mod.default_report_name(datetime(2024, 5, 1, 9, 30, 5))

    assert name == "quiz-results-20240501-093005.pdf"
