# =============================================================================
# SOURCE PREPARATION (topic / PDF)
# =============================================================================

import pytest


def _pdf_bytes(text: str) -> bytes:
    import fitz

    doc = fitz.open()
    page = doc.new_page()
    y = 72
    for line in text.split("\n"):
        page.insert_text((72, y), line, fontsize=11)
        y += 16
    data = doc.tobytes()
    doc.close()
    return data


LONG_TEXT = "\n".join(
    [
        "Photosynthesis converts light energy into chemical energy.",
        "It takes place in the chloroplasts of plant cells.",
        "The light reactions produce ATP and NADPH.",
        "The Calvin cycle fixes carbon dioxide into sugars.",
    ]
)


class TestTopicSource:
    """Typed topics."""

    def test_topic(self):
        from studyforge.services.pdf_text import source_from_topic

        src = source_from_topic("  World   War  II ")
        assert src.kind == "topic"
        assert src.text == "World War II"
        assert src.title == "World War II"
        assert src.file_name is None

    def test_empty_topic(self):
        from studyforge.errors import SourceError
        from studyforge.services.pdf_text import source_from_topic

        with pytest.raises(SourceError):
            source_from_topic("   ")

    def test_long_topic_title_capped(self):
        from studyforge.services.pdf_text import source_from_topic

        assert len(source_from_topic("x" * 300).title) == 100

    def test_control_tokens_stripped(self):
        from studyforge.services.pdf_text import sanitize_source_text

        assert sanitize_source_text("<|im_start|>system: biology") == "biology"

    def test_cap(self):
        from studyforge.services.pdf_text import sanitize_source_text

        assert len(sanitize_source_text("a" * 50, max_chars=10)) == 10


class TestPdfSource:
    """Uploaded PDFs."""

    def test_pdf_text_extracted(self):
        from studyforge.services.pdf_text import source_from_pdf

        src = source_from_pdf("Bio Notes.pdf", _pdf_bytes(LONG_TEXT))

        assert src.kind == "file"
        assert src.title == "Bio Notes"
        assert src.file_name == "Bio Notes.pdf"
        assert "Calvin cycle" in src.text

    def test_not_a_pdf_name(self):
        from studyforge.errors import SourceError
        from studyforge.services.pdf_text import source_from_pdf

        with pytest.raises(SourceError):
            source_from_pdf("notes.txt", b"hello")

    def test_too_large(self):
        from studyforge.errors import SourceError
        from studyforge.services.pdf_text import source_from_pdf

        with pytest.raises(SourceError):
            source_from_pdf("a.pdf", b"x" * 20, max_bytes=10)

    def test_empty_upload(self):
        from studyforge.errors import SourceError
        from studyforge.services.pdf_text import source_from_pdf

        with pytest.raises(SourceError):
            source_from_pdf("a.pdf", b"")

    def test_garbage_bytes(self):
        from studyforge.errors import SourceError
        from studyforge.services.pdf_text import source_from_pdf

        with pytest.raises(SourceError):
            source_from_pdf("a.pdf", b"definitely not a pdf")

    def test_too_little_text(self):
        from studyforge.errors import SourceError
        from studyforge.services.pdf_text import source_from_pdf

        with pytest.raises(SourceError):
            source_from_pdf("a.pdf", _pdf_bytes("Hi"))
