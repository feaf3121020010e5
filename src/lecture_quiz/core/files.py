"""Input discovery for lecture material paths."""

from __future__ import annotations

from pathlib import Path
from typing import AbstractSet, Iterator, List, Optional, Sequence

__all__ = ["iter_input_files"]


def iter_input_files(
    paths: Sequence[Path],
    *,
    extensions: Optional[AbstractSet[str]] = None,
    level_limit: int = 1,
) -> Iterator[Path]:
    """Yield files from ``paths`` preserving the order they were given.

    Explicit files are yielded as-is, whatever their extension, so the
    request normalizer can report unsupported uploads instead of silently
    dropping them. Directories contribute their files sorted by name,
    filtered to ``extensions`` (lowercase, no dot) when given.
    ``level_limit == 1`` only looks at direct children; ``0`` means no limit.
    """
    if level_limit < 0:
        raise ValueError("level_limit must be >= 0")

    for raw in paths:
        path = Path(raw)
        if path.is_file():
            yield path
            continue
        if not path.exists():
            raise FileNotFoundError(f"Input not found: {path}")
        if path.is_dir():
            yield from _directory_files(path, extensions, level_limit)


def _directory_files(
    root: Path, extensions: Optional[AbstractSet[str]], level_limit: int
) -> List[Path]:
    files = sorted(
        (child for child in root.rglob("*") if child.is_file()),
        key=lambda p: (p.name.lower(), str(p)),
    )
    if level_limit:
        files = [
            p for p in files if len(p.relative_to(root).parts) <= level_limit
        ]
    if extensions is not None:
        files = [p for p in files if p.suffix.lower().lstrip(".") in extensions]
    return files
