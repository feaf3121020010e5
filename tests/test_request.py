from __future__ import annotations

import pytest

from fixtures.slides import build_pptx, corrupt_member
from lecture_quiz import request as request_mod
from lecture_quiz.errors import ConfigError
from lecture_quiz.models import AssessmentType, Language
from lecture_quiz.sources import PDF_MIME, PPTX_MIME, Upload


def _pdf(name: str = "notes.pdf") -> Upload:
    return Upload(name=name, mime_type=PDF_MIME, data=b"%PDF-1.4 body")


def _deck(name: str = "week1.pptx", text: str = "Cells") -> Upload:
    data = build_pptx({"ppt/slides/slide1.xml": [text]})
    return Upload(name=name, mime_type=PPTX_MIME, data=data)


def test_eleven_uploads_rejected_before_any_file_is_processed(monkeypatch):
    processed = []
    monkeypatch.setattr(
        request_mod,
        "to_source_file",
        lambda upload: processed.append(upload.name),
    )
    uploads = [_pdf(f"f{index}.pdf") for index in range(11)]

    with pytest.raises(ConfigError) as excinfo:
        request_mod.normalize_request(
            uploads, assessment_type="quiz", language="English"
        )

    assert excinfo.value.reason == "too many files"
    assert processed == []


def test_ten_uploads_are_accepted():
    uploads = [_pdf(f"f{index}.pdf") for index in range(10)]

    normalized = request_mod.normalize_request(
        uploads, assessment_type="quiz", language="English"
    )

    assert len(normalized.request.source_files) == 10


@pytest.mark.parametrize(
    ("kind", "count"),
    [("quiz", 5), ("quiz", 20), ("exam", 30), ("exam", 50)],
)
def test_preset_counts_are_accepted(kind, count):
    assert request_mod.validate_question_count(kind, count) == count


@pytest.mark.parametrize(
    ("kind", "count"),
    [("quiz", 30), ("quiz", 12), ("exam", 20), ("exam", 45), ("quiz", True)],
)
def test_counts_outside_presets_are_rejected(kind, count):
    with pytest.raises(ConfigError) as excinfo:
        request_mod.validate_question_count(kind, count)

    assert excinfo.value.reason == "invalid question count for assessment type"


def test_switching_type_resets_to_type_default():
    assert request_mod.default_question_count("quiz") == 10
    assert request_mod.default_question_count(AssessmentType.EXAM) == 30
    assert request_mod.presets_for("exam") == (30, 40, 50)


def test_missing_count_uses_type_default():
    normalized = request_mod.normalize_request(
        [_pdf()], assessment_type="exam", language="Arabic"
    )

    assert normalized.request.question_count == 30
    assert normalized.request.language is Language.SECONDARY


def test_exam_count_is_not_coerced_for_quiz():
    with pytest.raises(ConfigError):
        request_mod.normalize_request(
            [_pdf()],
            assessment_type="quiz",
            language="English",
            question_count=30,
        )


def test_pdf_passes_through_as_bytes_and_deck_as_text():
    normalized = request_mod.normalize_request(
        [_pdf("a.pdf"), _deck("b.pptx", text="Mitosis")],
        assessment_type="quiz",
        language="English",
        question_count=5,
    )

    pdf, deck = normalized.request.source_files
    assert pdf.raw_bytes == b"%PDF-1.4 body"
    assert pdf.extracted_text is None
    assert deck.extracted_text == "[Slide 1] Mitosis\n"
    assert deck.raw_bytes is None
    assert normalized.warnings == ()


def test_unsupported_file_is_skipped_with_warning():
    uploads = [
        Upload(name="notes.docx", mime_type="application/msword", data=b"x"),
        _pdf("keep.pdf"),
    ]

    normalized = request_mod.normalize_request(
        uploads, assessment_type="quiz", language="English"
    )

    assert [s.name for s in normalized.request.source_files] == ["keep.pdf"]
    assert normalized.warnings == (
        request_mod.FileWarning("notes.docx", "unsupported file type"),
    )


def test_deck_detected_by_extension_even_with_generic_mime():
    upload = Upload(
        name="Lecture.PPTX",
        mime_type="application/octet-stream",
        data=build_pptx({"ppt/slides/slide1.xml": ["Hi"]}),
    )

    normalized = request_mod.normalize_request(
        [upload], assessment_type="quiz", language="English"
    )

    assert normalized.request.source_files[0].extracted_text == "[Slide 1] Hi\n"


def test_broken_deck_is_isolated_from_other_files():
    broken = Upload(name="broken.pptx", mime_type=PPTX_MIME, data=b"garbage")
    empty = Upload(
        name="empty.pptx",
        mime_type=PPTX_MIME,
        data=build_pptx({"ppt/slides/slide1.xml": []}),
    )

    normalized = request_mod.normalize_request(
        [_deck("first.pptx"), broken, empty, _pdf("last.pdf")],
        assessment_type="quiz",
        language="English",
    )

    assert [s.name for s in normalized.request.source_files] == [
        "first.pptx",
        "last.pdf",
    ]
    assert [(w.name, w.reason) for w in normalized.warnings] == [
        ("broken.pptx", "unreadable archive"),
        ("empty.pptx", "no text found"),
    ]


def test_deck_with_corrupt_compressed_slide_is_skipped():
    deck = build_pptx({"ppt/slides/slide1.xml": ["Cells"]})
    damaged = Upload(
        name="damaged.pptx",
        mime_type=PPTX_MIME,
        data=corrupt_member(deck, "ppt/slides/slide1.xml"),
    )

    normalized = request_mod.normalize_request(
        [damaged, _pdf("ok.pdf")],
        assessment_type="quiz",
        language="English",
    )

    assert [s.name for s in normalized.request.source_files] == ["ok.pdf"]
    assert [(w.name, w.reason) for w in normalized.warnings] == [
        ("damaged.pptx", "unreadable archive"),
    ]

def test_no_usable_file_left_is_an_error():
    broken = Upload(name="broken.pptx", mime_type=PPTX_MIME, data=b"garbage")

    with pytest.raises(ConfigError) as excinfo:
        request_mod.normalize_request(
            [broken], assessment_type="quiz", language="English"
        )

    assert excinfo.value.reason == ConfigError.NO_USABLE_FILES


def test_unknown_assessment_type_is_a_setting_error():
    with pytest.raises(ConfigError) as excinfo:
        request_mod.normalize_request(
            [_pdf()], assessment_type="midterm", language="English"
        )

    assert excinfo.value.reason == ConfigError.INVALID_SETTING
