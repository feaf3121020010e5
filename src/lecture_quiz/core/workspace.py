"""Workspace directory layout for lecture-quiz config, logs and reports."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

WORKSPACE_ENV = "LECTURE_QUIZ_HOME"
DEFAULT_WORKSPACE = Path.home() / ".lecture-quiz"

SUBDIRS: Mapping[str, str] = MappingProxyType(
    {
        "config": "config",
        "logs": "logs",
        "reports": "reports",
    }
)


class WorkspaceError(RuntimeError):
    """Raised when the workspace layout cannot be prepared."""


@dataclass(frozen=True)
class WorkspaceLayout:
    """Resolved workspace root and its named subdirectories."""

    home: Path
    directories: Mapping[str, Path]

    def path_for(self, key: str) -> Path:
        try:
            return self.directories[key]
        except KeyError as exc:
            raise KeyError(f"Unknown workspace directory '{key}'.") from exc


def ensure_workspace(
    *,
    env: Optional[Mapping[str, str]] = None,
    path: Optional[Path] = None,
    create: bool = True,
) -> WorkspaceLayout:
    """Resolve the workspace and, when ``create`` is set, make its folders.

    An explicit ``path`` wins over ``LECTURE_QUIZ_HOME``, which wins over
    ``~/.lecture-quiz``. Only the implicit default falls back to a temp
    directory when it is not writable.
    """

    env_map = os.environ if env is None else env
    base, explicit = _resolve_base(env_map, path)
    candidates = [base]
    if create and not explicit:
        candidates.append(Path(tempfile.gettempdir()) / "lecture-quiz")

    last_error: Optional[Exception] = None
    for candidate in candidates:
        try:
            return _layout_for(candidate, create=create)
        except PermissionError as exc:
            last_error = exc
    raise WorkspaceError(f"Unable to prepare workspace at {base}") from last_error


def _resolve_base(
    env: Mapping[str, str], override: Optional[Path]
) -> tuple[Path, bool]:
    if override is not None:
        return override.expanduser().absolute(), True
    custom = (env.get(WORKSPACE_ENV) or "").strip()
    if custom:
        return Path(custom).expanduser().absolute(), True
    return DEFAULT_WORKSPACE, False


def _layout_for(base: Path, *, create: bool) -> WorkspaceLayout:
    if base.exists() and not base.is_dir():
        raise WorkspaceError(f"Workspace path is not a directory: {base}")
    directories = {key: base / name for key, name in SUBDIRS.items()}
    for key, directory in directories.items():
        if create:
            directory.mkdir(parents=True, exist_ok=True)
            _chmod_private(directory)
        elif directory.exists() and not directory.is_dir():
            raise WorkspaceError(
                f"Expected workspace directory for '{key}' but found a file: "
                f"{directory}"
            )
    if create:
        _chmod_private(base)
    return WorkspaceLayout(
        home=base,
        directories=MappingProxyType(directories),
    )


def _chmod_private(path: Path) -> None:
    try:
        path.chmod(0o700)
    except (PermissionError, NotImplementedError):
        return
