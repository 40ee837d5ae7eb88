from __future__ import annotations

import asyncio
import logging
import random
from collections import OrderedDict
from typing import Any, Dict, Optional

from studyforge.errors import (
    GenerationCancelledError,
    GenerationInProgressError,
    GenerationTimeoutError,
    InvalidStateError,
)
from studyforge.services.pdf_text import QuizSource
from studyforge.services.quiz_gen import generate_quiz_questions
from studyforge.services.quiz_session import QuizSession, SessionState
from studyforge.services.shuffle import QuizMode

log = logging.getLogger("StudyForge")


class QuizWorkspace:
    """
    Per-owner holder of the current quiz session and the one generation
    request that may be in flight for it.
    """

    def __init__(
        self,
        *,
        llm,
        store=None,
        owner_key: str = "",
        mode: QuizMode = QuizMode.CORRECT_FIRST,
        shuffle: bool = True,
        timeout: float = 60.0,
        rng: Optional[random.Random] = None,
    ):
        self.llm = llm
        self.store = store
        self.owner_key = owner_key
        self.mode = QuizMode.parse(mode)
        self.shuffle = shuffle
        self.timeout = float(timeout)
        self.rng = rng

        self.session = QuizSession()
        self.source: Optional[QuizSource] = None
        self.saved_id: Optional[int] = None
        self._task: Optional[asyncio.Task] = None
        self._cancel_requested = False

    @property
    def loading(self) -> bool:
        return self._task is not None and not self._task.done()

    # -----------------------------
    # generation
    # -----------------------------
    async def generate(
        self,
        source: QuizSource,
        n: int,
        mode: "QuizMode | str | None" = None,
    ) -> QuizSession:
        if self.loading:
            raise GenerationInProgressError("A quiz is already being generated. Please wait.")

        used_mode = QuizMode.parse(mode, default=self.mode)
        coro = generate_quiz_questions(
            self.llm,
            source_text=source.text,
            n=n,
            mode=used_mode,
            shuffle=self.shuffle,
            rng=self.rng,
        )
        self._cancel_requested = False
        self._task = asyncio.ensure_future(asyncio.wait_for(coro, timeout=self.timeout))

        try:
            questions = await self._task
        except asyncio.TimeoutError as e:
            log.warning("Quiz generation timed out after %.0fs (owner=%s)", self.timeout, self.owner_key)
            raise GenerationTimeoutError("Generating the quiz took too long. Please try again.") from e
        except asyncio.CancelledError:
            if not self._cancel_requested:
                raise
            raise GenerationCancelledError("Quiz generation was cancelled.") from None
        finally:
            self._task = None

        # only a successful generation replaces the current attempt
        session = QuizSession(questions)
        self.session = session
        self.source = source
        self.saved_id = None
        return session

    def cancel(self) -> bool:
        task = self._task
        if task is None or task.done():
            return False
        self._cancel_requested = True
        task.cancel()
        log.info("Quiz generation cancelled (owner=%s)", self.owner_key)
        return True

    # -----------------------------
    # answering
    # -----------------------------
    def select_option(self, question_index: int, option_index: int) -> bool:
        try:
            self.session.select_option(question_index, option_index)
        except InvalidStateError as e:
            log.info("Ignored selection (%s): %s", self.session.state.value, e)
            return False
        return True

    def submit(self) -> Dict[str, Any]:
        already_graded = self.session.graded
        score = self.session.submit()

        saved = self.saved_id is not None
        if not already_graded and self.store is not None:
            saved = self._persist()

        return {
            "score": score,
            "total": self.session.total,
            "results": self.session.results(),
            "saved": saved,
            "attempt_id": self.saved_id,
        }

    def _persist(self) -> bool:
        src = self.source
        record = self.session.to_record(
            title=src.title if src else "Quiz",
            source_type=src.kind if src else "topic",
            source_file_name=src.file_name if src else None,
            owner_key=self.owner_key,
        )
        try:
            self.saved_id = self.store.add_quiz_attempt(record)
        except Exception:
            log.exception("Failed to save quiz attempt (owner=%s)", self.owner_key)
            return False
        return True

    # -----------------------------
    # views
    # -----------------------------
    def snapshot(self) -> Dict[str, Any]:
        s = self.session
        graded = s.graded
        questions = []
        for i, q in enumerate(s.questions):
            item: Dict[str, Any] = {
                "index": i,
                "question": q.text,
                "options": list(q.options),
                "selected_index": q.selected_index,
            }
            if graded:
                item["correct_index"] = q.correct_index
                item["is_correct"] = q.is_correct
            questions.append(item)

        return {
            "state": s.state.value,
            "loading": self.loading,
            "title": self.source.title if self.source else None,
            "source_type": self.source.kind if self.source else None,
            "questions": questions,
            "unanswered": s.unanswered() if s.state is SessionState.ANSWERING else [],
            "score": s.score,
            "total": s.total,
        }


class WorkspaceRegistry:
    """Bounded owner_key -> QuizWorkspace map; least recently used owners drop out first."""

    def __init__(self, factory, *, max_size: int = 500):
        self._factory = factory
        self._max = max(1, int(max_size))
        self._items: "OrderedDict[str, QuizWorkspace]" = OrderedDict()

    def get(self, owner_key: str) -> QuizWorkspace:
        ws = self._items.get(owner_key)
        if ws is None:
            ws = self._factory(owner_key)
            self._items[owner_key] = ws
        self._items.move_to_end(owner_key)

        while len(self._items) > self._max:
            _, old = self._items.popitem(last=False)
            old.cancel()
        return ws

    def drop(self, owner_key: str) -> None:
        ws = self._items.pop(owner_key, None)
        if ws is not None:
            ws.cancel()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, owner_key: str) -> bool:
        return owner_key in self._items
