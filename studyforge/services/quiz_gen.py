from __future__ import annotations

import logging
import random
from typing import List, Optional

from studyforge.models.quiz import CHOICE_COUNT, Question
from studyforge.services.quiz_parse import MAX_QUESTIONS, MIN_QUESTIONS, parse_quiz_response
from studyforge.services.shuffle import AnswerShuffler, QuizMode

log = logging.getLogger("StudyForge")

TEMPERATURE = 0.7

SYSTEM_PROMPT = (
    "You write accurate multiple-choice study questions.\n"
    "Output ONLY a JSON array. No markdown, no code fences, no commentary."
)


# -----------------------------
# Prompting
# -----------------------------
def _make_prompt(source_text: str, n: int, mode: QuizMode) -> str:
    if mode is QuizMode.CORRECT_FIRST:
        return (
            f"Generate {n} multiple-choice quiz questions based on: {source_text}\n\n"
            "CRITICAL INSTRUCTIONS:\n"
            f"1. Create factually accurate questions with {CHOICE_COUNT} options each\n"
            "2. The FIRST option (index 0) in the options array MUST be the CORRECT answer\n"
            f"3. The other {CHOICE_COUNT - 1} options should be plausible but incorrect distractors\n"
            "4. Set correctAnswer to 0 for all questions since the correct option is always first\n\n"
            "Return ONLY a valid JSON array with this exact structure:\n"
            "[\n"
            "  {\n"
            '    "question": "Your question here?",\n'
            '    "options": ["CORRECT ANSWER FIRST", "Wrong option 2", "Wrong option 3", "Wrong option 4"],\n'
            '    "correctAnswer": 0\n'
            "  }\n"
            "]\n\n"
            "IMPORTANT:\n"
            "- ALWAYS put the correct answer as the FIRST option (index 0)\n"
            "- Return ONLY the JSON array, no markdown, no explanations"
        )

    return (
        f"Generate {n} multiple-choice quiz questions based on: {source_text}\n\n"
        "IMPORTANT: Return ONLY a valid JSON array with objects containing:\n"
        '- "question": the question text (string)\n'
        f'- "options": array of exactly {CHOICE_COUNT} answer choices (array of strings)\n'
        '- "correctAnswer": the index (0, 1, 2, or 3) of the correct option in the options array (number)\n\n'
        "Make sure the correctAnswer index correctly points to the right answer in the options array. "
        "Double-check your indexing.\n\n"
        "Return ONLY the JSON array, no markdown code blocks, no explanations."
    )


def _max_tokens(n: int) -> int:
    return min(8192, 600 + n * 220)


# -----------------------------
# Public API
# -----------------------------
async def generate_quiz_questions(
    llm,
    *,
    source_text: str,
    n: int,
    mode: QuizMode = QuizMode.CORRECT_FIRST,
    shuffle: bool = True,
    rng: Optional[random.Random] = None,
) -> List[Question]:
    """
    One generation call -> parse -> shuffle.
    Raises ValueError (bad count), GenerationError, ParseError.
    """
    n = int(n)
    if n < MIN_QUESTIONS or n > MAX_QUESTIONS:
        raise ValueError(f"Please enter a number between {MIN_QUESTIONS} and {MAX_QUESTIONS}.")

    source_text = (source_text or "").strip()
    if not source_text:
        raise ValueError("Nothing to build a quiz from.")

    mode = QuizMode.parse(mode)
    prompt = _make_prompt(source_text, n, mode)

    raw = await llm.ask(
        prompt=prompt,
        system=SYSTEM_PROMPT,
        max_tokens=_max_tokens(n),
        temperature=TEMPERATURE,
    )

    try:
        questions = parse_quiz_response(raw or "", n, correct_first=mode is QuizMode.CORRECT_FIRST)
    except Exception:
        log.warning("Quiz parse failed. RAW (first 1200): %r", (raw or "")[:1200])
        raise

    shuffler = AnswerShuffler(mode, enabled=shuffle, rng=rng)
    out = shuffler.shuffle_all(questions)

    log.info("Quiz generated | mode=%s | shuffled=%s | %d/%d", mode.value, shuffler.enabled, len(out), n)
    return out
