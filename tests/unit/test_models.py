# =============================================================================
# MODELS / ERRORS
# =============================================================================

import pytest


class TestQuestion:
    """Frozen question value."""

    def test_options_become_tuple(self):
        from studyforge.models.quiz import Question

        q = Question(text="t", options=["a", "b", "c", "d"], correct_index=1)
        assert q.options == ("a", "b", "c", "d")
        assert q.correct_option == "b"
        assert not q.answered

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"options": ("a", "b", "c"), "correct_index": 0},
            {"options": ("a", "b", "c", "d"), "correct_index": 4},
            {"options": ("a", "b", "c", "d"), "correct_index": 0, "selected_index": -1},
        ],
    )
    def test_invalid(self, kwargs):
        from studyforge.models.quiz import Question

        with pytest.raises(ValueError):
            Question(text="t", **kwargs)

    def test_with_selection_returns_new_value(self):
        from studyforge.models.quiz import Question

        q = Question(text="t", options=("a", "b", "c", "d"), correct_index=1)
        picked = q.with_selection(1)

        assert q.selected_index is None
        assert picked.is_correct
        assert picked.to_dict()["selectedAnswer"] == 1

    def test_immutable(self):
        from dataclasses import FrozenInstanceError

        from studyforge.models.quiz import Question

        q = Question(text="t", options=("a", "b", "c", "d"), correct_index=1)
        with pytest.raises(FrozenInstanceError):
            q.correct_index = 2


class TestErrors:
    """Messages carried to the user."""

    def test_incomplete_answers_message_is_one_based(self):
        from studyforge.errors import IncompleteAnswersError

        e = IncompleteAnswersError([0, 4], 5)
        assert "answer all 5 questions" in str(e)
        assert "2 unanswered: 1, 5" in str(e)

    def test_parse_error_keeps_reason(self):
        from studyforge.errors import ParseError, ParseReason, StudyForgeError

        e = ParseError(ParseReason.MALFORMED_JSON, "bad")
        assert isinstance(e, StudyForgeError)
        assert e.reason.value == "malformed_json"

    def test_timeout_is_a_generation_error(self):
        from studyforge.errors import GenerationError, GenerationTimeoutError

        assert issubclass(GenerationTimeoutError, GenerationError)
