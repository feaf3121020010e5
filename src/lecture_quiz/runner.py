"""Command-line flow for ``lecture-quiz run`` and ``lecture-quiz config``."""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Sequence

from rich.console import Console

from .core import config_templates, configure_logger, iter_input_files
from .core import workspace as workspace_mod
from .core.config_templates import ConfigTemplateError
from .core.workspace import WorkspaceError
from .errors import ConfigError, LectureQuizError
from .generation import build_payload, generate_questions
from .models import AssessmentType, Language
from .report import (
    assemble_report,
    build_page_css,
    default_report_name,
    write_report_pdf,
)
from .request import MAX_SOURCE_FILES, normalize_request
from .session import run_quiz_session
from .settings import CONFIG_FILENAME, ConfigOverrides, load_settings
from .sources import Upload, read_upload

CONFIG_TEMPLATE_NAME = "lecture_quiz"
MATERIAL_EXTENSIONS = frozenset({"pdf", "pptx"})


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lecture-quiz run",
        description=(
            "Generate a quiz from lecture PDFs and slide decks, take it in the "
            "terminal and export a PDF results report."
        ),
        epilog=(
            "Run `lecture-quiz config init` to scaffold the default "
            "lecture_quiz.toml template."
        ),
    )
    parser.add_argument(
        "INPUTS",
        nargs="+",
        type=Path,
        help="PDF / PPTX files and/or directories containing them",
    )
    parser.add_argument(
        "--type",
        dest="assessment_type",
        choices=[kind.value for kind in AssessmentType],
        help="Assessment type (quiz or exam)",
    )
    parser.add_argument(
        "--count",
        type=int,
        help=(
            "Number of questions: quiz 5/10/15/20 (default 10), "
            "exam 30/40/50 (default 30)"
        ),
    )
    parser.add_argument(
        "--language",
        choices=[lang.value for lang in Language],
        help="Language for questions, options and explanations",
    )
    parser.add_argument("--model", help="Chat completion model override")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to lecture_quiz.toml (defaults to the workspace config)",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Workspace root override (defaults to LECTURE_QUIZ_HOME)",
    )
    parser.add_argument(
        "--report",
        type=Path,
        help="Write the PDF report to this path instead of the reports dir",
    )
    parser.add_argument(
        "--report-dir",
        type=Path,
        help="Directory for timestamped PDF reports",
    )
    parser.add_argument(
        "--no-report",
        action="store_true",
        help="Skip PDF export after submission",
    )
    parser.add_argument(
        "--level-limit",
        type=int,
        default=1,
        help="Directory depth to scan (0 = unlimited)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for the JSON log file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Mirror log records to stderr",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the generation payload and exit without calling the API",
    )
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    client: Optional[Any] = None,
    console: Optional[Console] = None,
    input_provider: Optional[Callable[[], str]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    overrides = ConfigOverrides(
        model=args.model,
        assessment_type=args.assessment_type,
        language=args.language,
        report_dir=args.report_dir,
        log_level=args.log_level,
    )
    try:
        load_result = load_settings(
            config_path=args.config,
            overrides=overrides,
            env=env,
            workspace_path=args.workspace,
        )
    except ConfigError as exc:
        return _fail(exc, code=2)

    config = load_result.config
    logger, log_path = configure_logger(
        "lecture_quiz",
        log_dir=load_result.layout.path_for("logs"),
        level=config.log_level,
        verbose=args.verbose,
    )
    logger.debug(
        "run invoked",
        extra={
            "inputs": [str(path) for path in args.INPUTS],
            "config_path": str(load_result.config_path or ""),
        },
    )

    try:
        uploads = _read_uploads(args.INPUTS, level_limit=args.level_limit)
    except ConfigError as exc:
        logger.error("Request rejected", extra={"reason": exc.reason})
        return _fail(exc, code=2)
    except (OSError, ValueError) as exc:
        sys.stderr.write(f"Error: {exc}\n")
        logger.error("Input discovery failed", extra={"error": str(exc)})
        return 2

    try:
        normalized = normalize_request(
            uploads,
            assessment_type=config.assessment_type,
            language=config.language,
            question_count=args.count,
        )
    except ConfigError as exc:
        logger.error("Request rejected", extra={"reason": exc.reason})
        return _fail(exc, code=2)

    for warning in normalized.warnings:
        sys.stderr.write(f"Warning: skipped {warning.name}: {warning.reason}\n")

    request = normalized.request
    if args.dry_run:
        sys.stdout.write(json.dumps(build_payload(request), indent=2) + "\n")
        return 0

    try:
        page_css = build_page_css(
            paper_size=config.report.paper_size,
            orientation=config.report.orientation,
            margin=config.report.margin,
        )
    except ConfigError as exc:
        return _fail(exc, code=2)

    try:
        questions = generate_questions(
            request, client=client, settings=config.generation
        )
    except LectureQuizError as exc:
        logger.error(
            "Question generation failed",
            extra={"reason": exc.reason, "detail": exc.detail},
        )
        return _fail(exc, code=1)

    console = console or Console()
    provider = input_provider or (lambda: console.input("[bold]> [/]"))
    session = run_quiz_session(questions, console, provider)
    logger.info(
        "Session finished",
        extra={
            "exit_action": session.exit_action,
            "answered": len(session.answers),
            "questions": len(questions),
        },
    )
    if session.result is None:
        sys.stdout.write("Quiz not submitted; no report written.\n")
        return 0
    if args.no_report:
        return 0

    report = assemble_report(
        session.result, generated_on=date.today(), language=config.language
    )
    target = (
        args.report.expanduser()
        if args.report is not None
        else config.report.output_dir / default_report_name()
    )
    try:
        written = write_report_pdf(report, target, page_css=page_css)
    except (RuntimeError, OSError) as exc:
        sys.stderr.write(f"Error: could not write report: {exc}\n")
        logger.error("Report export failed", extra={"error": str(exc)})
        return 1

    logger.info("Report written", extra={"path": str(written)})
    sys.stdout.write(f"Report written to {written}\n")
    sys.stdout.write(f"Logs: {log_path}\n")
    return 0


def _read_uploads(inputs: Sequence[Path], *, level_limit: int) -> List[Upload]:
    paths = [Path(raw).expanduser() for raw in inputs]
    discovered = iter_input_files(
        paths, extensions=MATERIAL_EXTENSIONS, level_limit=level_limit
    )
    found = list(discovered)
    if len(found) > MAX_SOURCE_FILES:
        raise ConfigError(
            ConfigError.TOO_MANY_FILES,
            detail=f"{len(found)} given, at most {MAX_SOURCE_FILES} allowed",
        )
    return [read_upload(path) for path in found]


def _fail(exc: LectureQuizError, *, code: int) -> int:
    message = f"Error: {exc.reason}"
    if exc.detail:
        message += f" ({exc.detail})"
    sys.stderr.write(message + "\n")
    return code


def config_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_config_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.command == "init":
        return _handle_config_init(args)

    parser.error(f"Unsupported config command '{args.command}'.")
    return 2  # pragma: no cover - argparse.error exits before here


def _build_config_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lecture-quiz config",
        description="Manage the lecture_quiz.toml configuration file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help="Write the default lecture_quiz.toml template.",
    )
    init_parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Destination for the config TOML (defaults to the workspace "
            "config directory)."
        ),
    )
    init_parser.add_argument(
        "--workspace",
        type=Path,
        help="Workspace root override used to resolve the default path.",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite the destination if a config already exists.",
    )
    return parser


def _handle_config_init(args: argparse.Namespace) -> int:
    try:
        target = _resolve_config_target(args)
        template = config_templates.get_template(CONFIG_TEMPLATE_NAME)
        written = template.write(target, overwrite=args.force)
    except (WorkspaceError, ConfigTemplateError) as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    sys.stdout.write(f"Wrote lecture-quiz config to {written}\n")
    return 0


def _resolve_config_target(args: argparse.Namespace) -> Path:
    if args.path is not None:
        candidate = args.path.expanduser()
        if not candidate.is_absolute():
            candidate = (Path.cwd() / candidate).resolve()
        return candidate

    layout = workspace_mod.ensure_workspace(path=args.workspace)
    return layout.path_for("config") / CONFIG_FILENAME


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(main())
