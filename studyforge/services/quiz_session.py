from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from studyforge.errors import IncompleteAnswersError, InvalidStateError
from studyforge.models.quiz import QuizAttemptRecord, Question

log = logging.getLogger("StudyForge")

TITLE_MAX = 100


class SessionState(str, Enum):
    EMPTY = "empty"
    ANSWERING = "answering"
    GRADED = "graded"


class QuizSession:
    """
    EMPTY -> ANSWERING -> GRADED

    - load() starts a fresh attempt and drops anything from the previous one
    - select_option() only while answering; a new pick overwrites the old one
    - submit() grades once every question is answered; the score is frozen
    """

    def __init__(self, questions: Optional[Sequence[Question]] = None):
        self._questions: List[Question] = []
        self._state = SessionState.EMPTY
        self._score: Optional[int] = None
        if questions:
            self.load(questions)

    # -----------------------------
    # read-only views
    # -----------------------------
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def graded(self) -> bool:
        return self._state is SessionState.GRADED

    @property
    def questions(self) -> List[Question]:
        return list(self._questions)

    @property
    def score(self) -> Optional[int]:
        return self._score

    @property
    def total(self) -> int:
        return len(self._questions)

    def __len__(self) -> int:
        return len(self._questions)

    def unanswered(self) -> List[int]:
        return [i for i, q in enumerate(self._questions) if not q.answered]

    def answers(self) -> List[Optional[int]]:
        return [q.selected_index for q in self._questions]

    # -----------------------------
    # transitions
    # -----------------------------
    def load(self, questions: Sequence[Question]) -> None:
        if not questions:
            raise ValueError("Cannot start a quiz with no questions")
        # selections never carry over into a new attempt
        self._questions = [
            Question(text=q.text, options=q.options, correct_index=q.correct_index)
            for q in questions
        ]
        self._score = None
        self._state = SessionState.ANSWERING

    def select_option(self, question_index: int, option_index: int) -> Question:
        if self._state is SessionState.GRADED:
            raise InvalidStateError("Quiz already submitted; answers are locked.")
        if self._state is SessionState.EMPTY:
            raise InvalidStateError("No quiz loaded.")

        if not (0 <= question_index < len(self._questions)):
            raise ValueError(f"question_index {question_index} out of range")
        q = self._questions[question_index]
        if not (0 <= option_index < len(q.options)):
            raise ValueError(f"option_index {option_index} out of range")

        updated = q.with_selection(option_index)
        self._questions[question_index] = updated
        return updated

    def submit(self) -> int:
        if self._state is SessionState.GRADED:
            return self._score  # type: ignore[return-value]
        if self._state is SessionState.EMPTY:
            raise InvalidStateError("No quiz loaded.")

        missing = self.unanswered()
        if missing:
            raise IncompleteAnswersError(missing, len(self._questions))

        self._score = sum(1 for q in self._questions if q.is_correct)
        self._state = SessionState.GRADED
        log.info("Quiz graded: %d/%d", self._score, len(self._questions))
        return self._score

    # -----------------------------
    # results / export
    # -----------------------------
    def results(self) -> List[Dict[str, Any]]:
        if not self.graded:
            raise InvalidStateError("Quiz not graded yet.")
        return [
            {
                "index": i,
                "selected_index": q.selected_index,
                "correct_index": q.correct_index,
                "is_correct": q.is_correct,
            }
            for i, q in enumerate(self._questions)
        ]

    def to_record(
        self,
        *,
        title: str,
        source_type: str,
        source_file_name: Optional[str] = None,
        owner_key: str = "",
    ) -> QuizAttemptRecord:
        if not self.graded:
            raise InvalidStateError("Only graded quizzes can be saved.")
        return QuizAttemptRecord(
            title=(title or "Quiz")[:TITLE_MAX],
            questions=[q.to_dict() for q in self._questions],
            answers=self.answers(),
            score=int(self._score or 0),
            total_questions=len(self._questions),
            source_type=source_type,
            source_file_name=source_file_name,
            owner_key=owner_key,
        )
