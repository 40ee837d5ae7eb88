import logging
import re
from typing import Any, List

from studyforge.errors import ParseError, ParseReason
from studyforge.models.cards import Flashcard
from studyforge.services.quiz_parse import extract_json_array
from studyforge.utils.text import jaccard_sim

log = logging.getLogger("StudyForge")

MAX_Q = 300
MAX_A = 1200
NOTES_CHARS_MAX = 30000

JACCARD_Q_SIM = 0.88


# -----------------------------
# Cleaning / validation
# -----------------------------
def _clean_text(s: str) -> str:
    s = (s or "").strip()
    s = re.sub(r"\s+", " ", s)
    s = re.sub(r"^\s*(\d+[\.\)]\s*|[-•]\s*)", "", s)
    return s.strip()


def _coerce_card(item: Any, pos: int) -> Flashcard:
    if not isinstance(item, dict):
        raise ParseError(ParseReason.INVALID_QUESTION, f"Flashcard {pos + 1} is not an object.")

    q = item.get("question")
    a = item.get("answer")
    if not isinstance(q, str) or not isinstance(a, str):
        raise ParseError(
            ParseReason.INVALID_QUESTION,
            f'Flashcard {pos + 1} needs text "question" and "answer" fields.',
        )

    q = _clean_text(q)[:MAX_Q]
    a = _clean_text(a)[:MAX_A]
    if not q or not a:
        raise ParseError(ParseReason.INVALID_QUESTION, f"Flashcard {pos + 1} is blank.")
    return Flashcard(question=q, answer=a)


# -----------------------------
# Dedupe / acceptance
# -----------------------------
def _accept_card(card: Flashcard, *, out: List[Flashcard]) -> bool:
    return not any(jaccard_sim(card.question, prev.question) >= JACCARD_Q_SIM for prev in out)


def parse_flashcards_response(text: str) -> List[Flashcard]:
    items = extract_json_array(text)
    if not items:
        raise ParseError(ParseReason.EMPTY, "The AI response contained no flashcards.")

    out: List[Flashcard] = []
    for i, item in enumerate(items):
        card = _coerce_card(item, i)
        if _accept_card(card, out=out):
            out.append(card)
        else:
            log.debug("Dropped near-duplicate flashcard: %r", card.question[:80])
    return out


# -----------------------------
# Public API
# -----------------------------
async def generate_flashcards(llm, *, notes: str) -> List[Flashcard]:
    notes = (notes or "").strip()
    if not notes:
        raise ValueError("Please enter some study notes first.")

    prompt = (
        "Convert these study notes into flashcards. Return ONLY a valid JSON array "
        'with objects containing "question" and "answer" fields. '
        "No markdown, no explanation, just the JSON array:\n\n"
        f"{notes[:NOTES_CHARS_MAX]}"
    )

    raw = await llm.ask(
        prompt=prompt,
        system="You are a study assistant. Return ONLY valid JSON.",
        max_tokens=4096,
    )

    try:
        cards = parse_flashcards_response(raw or "")
    except ParseError as e:
        log.warning("Flashcards parse failed (%s). RAW (first 900): %r", e.reason.value, (raw or "")[:900])
        raise

    log.info("Flashcards generated: %d", len(cards))
    return cards
