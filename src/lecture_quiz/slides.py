"""Plain-text extraction from PowerPoint (``.pptx``) slide decks.

A deck is a zip archive holding one OpenXML part per slide under
``ppt/slides/slideN.xml``. Visible text lives in DrawingML run-text elements
(``<a:t>``). The extractor reads those parts in numeric slide order and emits
one ``[Slide N] ...`` line per slide that has any text.

Design:
- ``extract_slide_text`` is a pure function of the input bytes.
- ``main()`` exposes it as ``lecture-quiz extract-slides`` for inspection.
"""

from __future__ import annotations

import argparse
import io
import re
import sys
import zipfile
import zlib
from pathlib import Path
from typing import List, Optional, Sequence

from lxml import etree

from .errors import ExtractionError

__all__ = [
    "SLIDE_PREFIX",
    "extract_slide_text",
    "list_slide_parts",
    "main",
]

SLIDE_PREFIX = "ppt/slides/slide"
SLIDE_SUFFIX = ".xml"
DRAWINGML_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"

_RUN_TEXT_TAG = f"{{{DRAWINGML_NS}}}t"
_SLIDE_NUMBER_RE = re.compile(r"^ppt/slides/slide(\d+)\.xml$")
_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)


def list_slide_parts(names: Sequence[str]) -> List[str]:
    """Return slide part names in presentation order.

    Parts are sorted by their numeric suffix, so ``slide2`` precedes
    ``slide10``. Parts that share the prefix and extension but carry no
    parsable number keep their archive order and follow the numbered ones.
    """

    candidates = [
        name
        for name in names
        if name.startswith(SLIDE_PREFIX) and name.endswith(SLIDE_SUFFIX)
    ]
    numbered: list[tuple[int, str]] = []
    unnumbered: list[str] = []
    for name in candidates:
        match = _SLIDE_NUMBER_RE.match(name)
        if match:
            numbered.append((int(match.group(1)), name))
        else:
            unnumbered.append(name)
    numbered.sort(key=lambda item: item[0])
    return [name for _, name in numbered] + unnumbered


def extract_slide_text(data: bytes) -> str:
    """Extract visible slide text from ``data`` in slide order.

    Raises :class:`ExtractionError` with reason ``unreadable archive`` when
    the bytes are not a readable deck and ``no text found`` when no slide
    carries any text.
    """

    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, OSError, ValueError) as exc:
        raise ExtractionError(
            ExtractionError.UNREADABLE_ARCHIVE, detail=str(exc)
        ) from exc

    lines: list[str] = []
    with archive:
        parts = list_slide_parts(archive.namelist())
        for position, name in enumerate(parts, start=1):
            text = _slide_text(archive, name)
            if text:
                lines.append(f"[Slide {position}] {text}\n")

    if not lines:
        raise ExtractionError(ExtractionError.NO_TEXT_FOUND)
    return "".join(lines)


def _slide_text(archive: zipfile.ZipFile, name: str) -> str:
    try:
        content = archive.read(name)
        root = etree.fromstring(content, parser=_PARSER)
    except (
        zipfile.BadZipFile,
        zlib.error,
        RuntimeError,
        NotImplementedError,
        EOFError,
        etree.XMLSyntaxError,
        OSError,
    ) as exc:
        raise ExtractionError(
            ExtractionError.UNREADABLE_ARCHIVE,
            detail=f"{name}: {exc}",
        ) from exc
    runs = [node.text for node in root.iter(_RUN_TEXT_TAG) if node.text]
    return " ".join(runs).strip()


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="lecture-quiz extract-slides",
        description="Print the text a slide deck would contribute to a quiz.",
    )
    parser.add_argument("DECK", help="Path to a .pptx slide deck")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    path = Path(args.DECK).expanduser()
    try:
        data = path.read_bytes()
    except OSError as exc:
        sys.stderr.write(f"Error: cannot read {path}: {exc}\n")
        return 1
    try:
        text = extract_slide_text(data)
    except ExtractionError as exc:
        sys.stderr.write(f"Error: {path.name}: {exc.reason}\n")
        return 1
    sys.stdout.write(text)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(main())
