from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from studyforge.errors import SourceError

SOURCE_CHARS_MAX = 30000
PDF_MAX_BYTES = 8_000_000
PDF_MIN_TEXT = 120
TITLE_MAX = 100


def pdf_to_text(pdf_bytes: bytes) -> str:
    """
    Extract selectable text from PDF (no OCR).
    Requires: pip install pymupdf
    """
    import fitz

    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except Exception as e:
        raise SourceError(f"Could not read PDF: {e}") from e

    chunks: list[str] = []
    try:
        for page in doc:
            chunks.append(page.get_text("text"))
    finally:
        doc.close()

    text = "\n".join(chunks).strip()
    text = re.sub(r"[ \t]+\n", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


_CONTROL_RE = re.compile(r"(<\|.*?\|>)|(\b(role|system|developer|assistant|user)\s*:)", re.I | re.S)


def sanitize_source_text(text: str, max_chars: int = SOURCE_CHARS_MAX) -> str:
    """
    Remove control-token patterns that can hijack some Llama-style models,
    then cap the length sent to the generator.
    """
    t = (text or "").strip()
    t = _CONTROL_RE.sub("", t)
    return t[:max_chars].strip()


@dataclass
class QuizSource:
    kind: str  # "file" | "topic"
    text: str
    title: str
    file_name: Optional[str] = None


def source_from_topic(topic: str, *, max_chars: int = SOURCE_CHARS_MAX) -> QuizSource:
    t = " ".join((topic or "").split())
    if not t:
        raise SourceError("Please enter a topic.")
    return QuizSource(
        kind="topic",
        text=sanitize_source_text(t, max_chars),
        title=t[:TITLE_MAX],
    )


def source_from_pdf(
    file_name: str,
    pdf_bytes: bytes,
    *,
    max_bytes: int = PDF_MAX_BYTES,
    max_chars: int = SOURCE_CHARS_MAX,
) -> QuizSource:
    fname = (file_name or "").strip()
    if not fname.lower().endswith(".pdf"):
        raise SourceError("Please upload a PDF file only.")
    if not pdf_bytes:
        raise SourceError("The uploaded PDF is empty.")
    if len(pdf_bytes) > max_bytes:
        raise SourceError(f"PDF too large (max {max_bytes // 1_000_000}MB).")

    text = pdf_to_text(pdf_bytes)
    if len(text) < PDF_MIN_TEXT:
        raise SourceError("PDF has too little selectable text (maybe scanned images).")

    title = re.sub(r"\.pdf$", "", fname, flags=re.I).strip() or "Uploaded PDF"
    return QuizSource(
        kind="file",
        text=sanitize_source_text(text, max_chars),
        title=title[:TITLE_MAX],
        file_name=fname,
    )
