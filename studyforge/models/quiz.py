from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Tuple

CHOICE_COUNT = 4


@dataclass(frozen=True)
class Question:
    text: str
    options: Tuple[str, ...]
    correct_index: int
    selected_index: Optional[int] = None

    def __post_init__(self):
        # accept lists from callers, store an immutable tuple
        object.__setattr__(self, "options", tuple(self.options))
        if len(self.options) != CHOICE_COUNT:
            raise ValueError(f"Question must have exactly {CHOICE_COUNT} options")
        if not (0 <= self.correct_index < CHOICE_COUNT):
            raise ValueError("correct_index out of range")
        if self.selected_index is not None and not (0 <= self.selected_index < CHOICE_COUNT):
            raise ValueError("selected_index out of range")

    @property
    def answered(self) -> bool:
        return self.selected_index is not None

    @property
    def is_correct(self) -> bool:
        return self.selected_index == self.correct_index

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_index]

    def with_selection(self, option_index: int) -> "Question":
        return replace(self, selected_index=option_index)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.text,
            "options": list(self.options),
            "correctAnswer": self.correct_index,
            "selectedAnswer": self.selected_index,
        }


@dataclass
class QuizAttemptRecord:
    """Graded attempt, shaped for the persistence collaborator."""

    title: str
    questions: List[Dict[str, Any]]
    answers: List[Optional[int]]
    score: int
    total_questions: int
    source_type: str
    source_file_name: Optional[str] = None
    owner_key: str = ""
    id: Optional[int] = None
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "questions": self.questions,
            "answers": self.answers,
            "score": self.score,
            "total_questions": self.total_questions,
            "source_type": self.source_type,
            "source_file_name": self.source_file_name,
            "created_at": self.created_at,
        }
