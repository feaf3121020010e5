from __future__ import annotations

import pytest

from fixtures.slides import build_pptx
from lecture_quiz import sources
from lecture_quiz.core import iter_input_files
from lecture_quiz.errors import ExtractionError
from lecture_quiz.models import SourceFile


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("notes.pdf", sources.PDF_MIME),
        ("Deck.PPTX", sources.PPTX_MIME),
        ("readme.txt", "text/plain"),
        ("mystery.zzz", "application/octet-stream"),
    ],
)
def test_guess_mime_type(name, expected):
    assert sources.guess_mime_type(name) == expected


def test_read_upload_keeps_name_and_bytes(tmp_path):
    path = tmp_path / "week2.pdf"
    path.write_bytes(b"%PDF-1.4")

    upload = sources.read_upload(path)

    assert upload == sources.Upload("week2.pdf", sources.PDF_MIME, b"%PDF-1.4")


def test_to_source_file_extracts_decks():
    upload = sources.Upload(
        "d.pptx",
        sources.PPTX_MIME,
        build_pptx({"ppt/slides/slide1.xml": ["Hi"]}),
    )

    source = sources.to_source_file(upload)

    assert source.is_text
    assert source.extracted_text == "[Slide 1] Hi\n"


def test_to_source_file_propagates_extraction_errors():
    upload = sources.Upload("d.pptx", sources.PPTX_MIME, b"junk")

    with pytest.raises(ExtractionError):
        sources.to_source_file(upload)


def test_to_source_file_rejects_other_types():
    with pytest.raises(ValueError):
        sources.to_source_file(sources.Upload("a.txt", "text/plain", b"x"))


def test_source_file_needs_exactly_one_payload():
    with pytest.raises(ValueError):
        SourceFile(name="x", mime_type=sources.PDF_MIME)
    with pytest.raises(ValueError):
        SourceFile(
            name="x",
            mime_type=sources.PDF_MIME,
            raw_bytes=b"a",
            extracted_text="a",
        )


def test_iter_input_files_preserves_argument_order(workspace):
    root = workspace.create(
        {
            "b.pdf": b"b",
            "lectures": {
                "week2.pptx": b"2",
                "Week1.pdf": b"1",
                "notes.txt": "skip",
                "nested": {"deep.pdf": b"d"},
            },
        }
    )

    found = list(
        iter_input_files(
            [root / "b.pdf", root / "lectures"], extensions={"pdf", "pptx"}
        )
    )

    assert [p.name for p in found] == ["b.pdf", "Week1.pdf", "week2.pptx"]


def test_iter_input_files_without_depth_limit(workspace):
    root = workspace.create({"top.pdf": b"t", "nested": {"deep.pdf": b"d"}})

    found = list(iter_input_files([root], level_limit=0))

    assert sorted(p.name for p in found) == ["deep.pdf", "top.pdf"]


def test_iter_input_files_keeps_explicit_unsupported_files(workspace):
    path = workspace.write("notes.docx", b"doc")

    assert list(iter_input_files([path], extensions={"pdf"})) == [path]


def test_iter_input_files_missing_path(tmp_path):
    with pytest.raises(FileNotFoundError):
        list(iter_input_files([tmp_path / "missing.pdf"]))
