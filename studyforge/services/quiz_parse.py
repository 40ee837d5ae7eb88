from __future__ import annotations

import json
import logging
import re
from typing import Any, List

from studyforge.errors import ParseError, ParseReason
from studyforge.models.quiz import CHOICE_COUNT, Question

log = logging.getLogger("StudyForge")

MIN_QUESTIONS = 1
MAX_QUESTIONS = 20

# greedy: first "[" to last "]"
_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)


# -----------------------------
# JSON helpers
# -----------------------------
def extract_json_array(text: str) -> List[Any]:
    """
    Locate the bracketed array inside an LLM reply and decode it.
    Raises ParseError(NO_ARRAY | MALFORMED_JSON).
    """
    m = _ARRAY_RE.search(text or "")
    if not m:
        raise ParseError(ParseReason.NO_ARRAY, "Could not find a question list in the AI response.")

    try:
        data = json.loads(m.group(0))
    except json.JSONDecodeError as e:
        raise ParseError(
            ParseReason.MALFORMED_JSON,
            f"The AI response contained malformed JSON ({e.msg} at char {e.pos}).",
        ) from e

    if not isinstance(data, list):
        raise ParseError(ParseReason.MALFORMED_JSON, "The AI response is not a JSON array.")
    return data


def _check_count(n: int) -> int:
    n = int(n)
    if n < MIN_QUESTIONS or n > MAX_QUESTIONS:
        raise ValueError(f"Question count must be between {MIN_QUESTIONS} and {MAX_QUESTIONS}.")
    return n


# -----------------------------
# Validation
# -----------------------------
def _build_question(item: Any, pos: int, *, correct_first: bool) -> Question:
    num = pos + 1
    if not isinstance(item, dict):
        raise ParseError(ParseReason.INVALID_QUESTION, f"Question {num} is not an object.")

    text = item.get("question")
    if not isinstance(text, str) or not text.strip():
        raise ParseError(ParseReason.INVALID_QUESTION, f"Question {num} has no question text.")

    options = item.get("options")
    if not isinstance(options, list) or len(options) != CHOICE_COUNT:
        got = len(options) if isinstance(options, list) else 0
        raise ParseError(
            ParseReason.WRONG_OPTION_COUNT,
            f"Question {num} must have exactly {CHOICE_COUNT} options (got {got}).",
        )
    if not all(isinstance(o, str) for o in options):
        raise ParseError(ParseReason.INVALID_QUESTION, f"Question {num} has non-text options.")

    if correct_first:
        correct = 0
    else:
        correct = item.get("correctAnswer")
        # bool is an int subclass; true/false is not an index
        if isinstance(correct, bool) or not isinstance(correct, int):
            raise ParseError(
                ParseReason.INVALID_QUESTION, f"Question {num} has no integer correctAnswer."
            )
        if not (0 <= correct < CHOICE_COUNT):
            raise ParseError(
                ParseReason.INVALID_QUESTION,
                f"Question {num} correctAnswer {correct} is outside 0-{CHOICE_COUNT - 1}.",
            )

    return Question(text=text.strip(), options=options, correct_index=correct)


# -----------------------------
# Public API
# -----------------------------
def parse_quiz_response(text: str, n: int, *, correct_first: bool = False) -> List[Question]:
    """
    Turn a raw generation reply into at most ``n`` questions.

    With ``correct_first`` the reply is expected to carry the correct option at
    index 0 and ``correctAnswer`` is ignored.
    """
    n = _check_count(n)
    items = extract_json_array(text)
    if not items:
        raise ParseError(ParseReason.EMPTY, "The AI response contained no questions.")

    items = items[:n]
    out = [_build_question(item, i, correct_first=correct_first) for i, item in enumerate(items)]

    if len(out) < n:
        log.warning("Quiz response short: %d/%d questions", len(out), n)
    return out
