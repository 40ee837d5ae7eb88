from __future__ import annotations

from enum import Enum
from typing import Iterable, List


class StudyForgeError(Exception):
    """Base class for recoverable errors surfaced to the user."""


class ParseReason(str, Enum):
    NO_ARRAY = "no_array"
    MALFORMED_JSON = "malformed_json"
    WRONG_OPTION_COUNT = "wrong_option_count"
    INVALID_QUESTION = "invalid_question"
    EMPTY = "empty"


class ParseError(StudyForgeError):
    def __init__(self, reason: ParseReason, message: str):
        super().__init__(message)
        self.reason = reason


class InvalidStateError(StudyForgeError):
    pass


class IncompleteAnswersError(StudyForgeError):
    def __init__(self, unanswered: Iterable[int], total: int):
        self.unanswered: List[int] = list(unanswered)
        self.total = total
        numbers = ", ".join(str(i + 1) for i in self.unanswered)
        super().__init__(
            f"Please answer all {total} questions before submitting "
            f"({len(self.unanswered)} unanswered: {numbers})."
        )


class SourceError(StudyForgeError):
    pass


class GenerationError(StudyForgeError):
    pass


class GenerationTimeoutError(GenerationError):
    pass


class GenerationInProgressError(StudyForgeError):
    pass


class GenerationCancelledError(GenerationError):
    pass
