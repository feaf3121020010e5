"""Quiz result reports: ordered block assembly and PDF rendering.

Features:
- Assemble a scored attempt into a header plus one block per question, in
  question order, with no question dropped.
- Render the blocks to HTML through a Jinja2 template, left-to-right or
  right-to-left depending on the quiz language.
- Write the HTML to PDF with WeasyPrint, which owns line wrapping and page
  breaks; ``@page`` CSS sets paper size, orientation and margins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from jinja2 import Environment

from .errors import ConfigError
from .models import Language, ScoredResult

__all__ = [
    "LABELS",
    "PAPER_SIZES",
    "Report",
    "ReportBlock",
    "ReportHeader",
    "assemble_report",
    "build_page_css",
    "default_report_name",
    "render_report_html",
    "write_report_pdf",
]

PAPER_SIZES = {"letter": "Letter", "a4": "A4", "legal": "Legal", "a5": "A5"}

LABELS: Mapping[Language, Mapping[str, str]] = {
    Language.PRIMARY: {
        "title": "Quiz Results Report",
        "score": "Score",
        "date": "Date",
        "status": "Status",
        "correct": "Correct",
        "incorrect": "Incorrect",
        "your_answer": "Your answer",
        "correct_answer": "Correct answer",
        "explanation": "Explanation",
        "skipped": "Skipped",
    },
    Language.SECONDARY: {
        "title": "تقرير نتائج الاختبار",
        "score": "النتيجة",
        "date": "التاريخ",
        "status": "الحالة",
        "correct": "صحيح",
        "incorrect": "خطأ",
        "your_answer": "إجابتك",
        "correct_answer": "الإجابة الصحيحة",
        "explanation": "الشرح",
        "skipped": "تم التخطي",
    },
}


@dataclass(frozen=True)
class ReportHeader:
    correct_count: int
    total: int
    percentage: int
    generated_on: date


@dataclass(frozen=True)
class ReportBlock:
    """Everything the report shows for one question."""

    number: int
    prompt: str
    is_correct: bool
    selected_text: Optional[str]
    correct_text: Optional[str]
    explanation: str

    @property
    def skipped(self) -> bool:
        return self.selected_text is None


@dataclass(frozen=True)
class Report:
    header: ReportHeader
    blocks: Tuple[ReportBlock, ...]
    language: Language = Language.PRIMARY


def assemble_report(
    result: ScoredResult,
    *,
    generated_on: Optional[date] = None,
    language: Language = Language.PRIMARY,
) -> Report:
    """Build the report description for ``result``.

    The correct option is only spelled out for questions the user got
    wrong, skipped ones included.
    """

    header = ReportHeader(
        correct_count=result.correct_count,
        total=result.total,
        percentage=result.percentage,
        generated_on=generated_on or date.today(),
    )
    blocks = tuple(
        ReportBlock(
            number=outcome.index + 1,
            prompt=outcome.question.prompt,
            is_correct=outcome.is_correct,
            selected_text=outcome.question.option_text(outcome.selected_index),
            correct_text=(
                None if outcome.is_correct else outcome.question.correct_option
            ),
            explanation=outcome.question.explanation,
        )
        for outcome in result.per_question
    )
    return Report(header=header, blocks=blocks, language=language)


_REPORT_TEMPLATE = """
<!DOCTYPE html>
<html lang="{{ lang }}" dir="{{ direction }}">
<head>
  <meta charset="utf-8">
  <style>
    body { font-family: 'DejaVu Sans', 'Liberation Sans', sans-serif;
           color: #222; line-height: 1.4; font-size: 10.5pt; }
    h1 { color: #4f46e5; font-size: 20pt; margin: 0 0 0.4em; }
    .summary { font-size: 13pt; color: #333; margin-bottom: 1.5em; }
    .question { page-break-inside: avoid; margin-bottom: 1.4em; }
    .question h2 { font-size: 11.5pt; margin: 0 0 0.3em; }
    .status.correct { color: #10b981; font-weight: bold; }
    .status.incorrect { color: #dc2626; font-weight: bold; }
    .answer { color: #555; margin: 0.15em 0; }
    .expected { color: #059669; margin: 0.15em 0; }
    .explanation { color: #323246; font-style: italic; margin: 0.3em 0 0; }
  </style>
</head>
<body>
  <h1>{{ labels.title }}</h1>
  <div class="summary">
    <div>{{ labels.score }}: {{ header.correct_count }} / {{ header.total }}
      ({{ header.percentage }}%)</div>
    <div>{{ labels.date }}: {{ header.generated_on.isoformat() }}</div>
  </div>
  {% for block in blocks %}
  <section class="question">
    <h2>Q{{ block.number }}: {{ block.prompt }}</h2>
    <div class="status {{ 'correct' if block.is_correct else 'incorrect' }}">
      {{ labels.status }}:
      {{ (labels.correct if block.is_correct else labels.incorrect)|upper }}
    </div>
    <div class="answer">{{ labels.your_answer }}:
      {{ labels.skipped if block.skipped else block.selected_text }}</div>
    {% if block.correct_text is not none %}
    <div class="expected">{{ labels.correct_answer }}: {{ block.correct_text }}</div>
    {% endif %}
    {% if block.explanation %}
    <p class="explanation">{{ labels.explanation }}: {{ block.explanation }}</p>
    {% endif %}
  </section>
  {% endfor %}
</body>
</html>
"""


def render_report_html(
    report: Report, *, labels: Optional[Mapping[str, str]] = None
) -> str:
    env = Environment(autoescape=True)
    template = env.from_string(_REPORT_TEMPLATE)
    return template.render(
        lang="ar" if report.language.is_rtl else "en",
        direction="rtl" if report.language.is_rtl else "ltr",
        labels=labels or LABELS[report.language],
        header=report.header,
        blocks=report.blocks,
    )


_CSS_UNIT_RE = re.compile(r"^(?:\d+\.?\d*|\d*\.\d+)(?:in|cm|mm|pt)$")


def build_page_css(
    *,
    paper_size: str = "a4",
    orientation: str = "portrait",
    margin: str = "2cm",
) -> str:
    """Return the ``@page`` rule for the report.

    ``margin`` is CSS shorthand with one to four sizes in in, cm, mm or pt.
    """

    size = PAPER_SIZES.get(paper_size.strip().lower())
    if size is None:
        raise ConfigError(
            ConfigError.INVALID_SETTING,
            detail=(
                f"unsupported paper size '{paper_size}', choose from "
                f"{sorted(PAPER_SIZES)}"
            ),
        )
    if orientation not in ("portrait", "landscape"):
        raise ConfigError(
            ConfigError.INVALID_SETTING,
            detail="orientation must be 'portrait' or 'landscape'",
        )
    values = margin.split()
    if not 1 <= len(values) <= 4 or not all(
        _CSS_UNIT_RE.match(value) for value in values
    ):
        raise ConfigError(
            ConfigError.INVALID_SETTING,
            detail=(
                f"invalid margin '{margin}', use 1-4 sizes such as '2cm' or "
                "'1in 0.5in'"
            ),
        )
    return (
        "@page {\n"
        f"  size: {size} {orientation};\n"
        f"  margin: {' '.join(values)};\n"
        "}\n"
    )


def default_report_name(now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return f"quiz-results-{stamp}.pdf"


def write_report_pdf(
    report: Report,
    target: Path,
    *,
    page_css: Optional[str] = None,
) -> Path:
    """Render ``report`` to a PDF file at ``target`` and return the path."""

    html_cls, css_cls = _load_weasyprint()
    html_doc = render_report_html(report)
    stylesheets = [css_cls(string=page_css or build_page_css())]
    target = Path(target)
    target.parent.mkdir(parents=True, exist_ok=True)
    html_cls(string=html_doc, base_url=str(target.parent)).write_pdf(
        target=str(target), stylesheets=stylesheets
    )
    return target


def _load_weasyprint() -> Tuple[Any, Any]:
    try:
        from weasyprint import CSS, HTML
    except (ImportError, OSError) as exc:
        raise RuntimeError(
            "WeasyPrint is required for PDF reports. Install system libraries "
            "(Pango) and the 'weasyprint' package."
        ) from exc
    return HTML, CSS
