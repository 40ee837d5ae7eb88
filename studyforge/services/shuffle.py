from __future__ import annotations

import random
from enum import Enum
from typing import List, Optional, Sequence

from studyforge.models.quiz import Question


class QuizMode(str, Enum):
    """Where the generator puts the correct option."""

    PROVIDED_INDEX = "provided_index"  # trust "correctAnswer"
    CORRECT_FIRST = "correct_first"  # always index 0, shuffled afterwards

    @classmethod
    def parse(cls, value: "str | QuizMode | None", default: "QuizMode | None" = None) -> "QuizMode":
        if isinstance(value, cls):
            return value
        v = (value or "").strip().lower()
        if not v and default is not None:
            return default
        try:
            return cls(v)
        except ValueError:
            raise ValueError(
                f"Unknown quiz mode {value!r} (expected one of: {', '.join(m.value for m in cls)})"
            ) from None


def permutation(n: int, rng: random.Random) -> List[int]:
    """Fisher-Yates over indices 0..n-1."""
    idx = list(range(n))
    for i in range(n - 1, 0, -1):
        j = rng.randrange(i + 1)
        idx[i], idx[j] = idx[j], idx[i]
    return idx


def apply_permutation(q: Question, perm: Sequence[int]) -> Question:
    """
    Reorder options so that new position k holds old option perm[k].
    The correct pointer follows the index, never the option text.
    """
    if sorted(perm) != list(range(len(q.options))):
        raise ValueError(f"Not a permutation of {len(q.options)} options: {list(perm)}")

    options = [q.options[p] for p in perm]
    correct = list(perm).index(q.correct_index)
    return Question(text=q.text, options=options, correct_index=correct)


class AnswerShuffler:
    def __init__(
        self,
        mode: QuizMode = QuizMode.PROVIDED_INDEX,
        *,
        enabled: bool = True,
        rng: Optional[random.Random] = None,
    ):
        self.mode = QuizMode.parse(mode)
        # correct-first without shuffling would put every answer on "A"
        self.enabled = bool(enabled) or self.mode is QuizMode.CORRECT_FIRST
        self.rng = rng or random.SystemRandom()

    def shuffle(self, q: Question) -> Question:
        if not self.enabled:
            return q
        return apply_permutation(q, permutation(len(q.options), self.rng))

    def shuffle_all(self, questions: Sequence[Question]) -> List[Question]:
        return [self.shuffle(q) for q in questions]
