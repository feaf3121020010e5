"""``lecture-quiz init``: create the workspace and its subdirectories."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from .core import workspace as workspace_mod


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lecture-quiz init",
        description=(
            "Bootstrap the lecture-quiz workspace (config, logs and reports "
            "directories)."
        ),
    )
    parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Override the workspace root (defaults to LECTURE_QUIZ_HOME "
            "or ~/.lecture-quiz)."
        ),
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational output on success.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        layout = workspace_mod.ensure_workspace(path=args.path)
    except workspace_mod.WorkspaceError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1

    if args.quiet:
        return 0

    lines = [f"Workspace ready at {layout.home}"]
    width = max(len(name) for name in layout.directories)
    for name, directory in layout.directories.items():
        lines.append(f"  {name.ljust(width)}  {directory}")
    sys.stdout.write("\n".join(lines) + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
