# =============================================================================
# STUDY STORE (sqlite3)
# =============================================================================

import pytest


def _record(owner="s:alice", title="Cells", score=2, total=3, source_type="topic", file_name=None):
    from studyforge.models.quiz import QuizAttemptRecord

    return QuizAttemptRecord(
        title=title,
        questions=[{"question": "Q?", "options": ["a", "b", "c", "d"], "correctAnswer": 0, "selectedAnswer": 0}],
        answers=[0],
        score=score,
        total_questions=total,
        source_type=source_type,
        source_file_name=file_name,
        owner_key=owner,
    )


class TestQuizAttempts:
    """CRUD scoped to the owner."""

    def test_add_and_get(self, store):
        attempt_id = store.add_quiz_attempt(_record(source_type="file", file_name="bio.pdf"))
        rec = store.get_quiz_attempt("s:alice", attempt_id)

        assert rec.id == attempt_id
        assert rec.title == "Cells"
        assert rec.score == 2
        assert rec.total_questions == 3
        assert rec.source_type == "file"
        assert rec.source_file_name == "bio.pdf"
        assert rec.questions[0]["options"] == ["a", "b", "c", "d"]
        assert rec.answers == [0]
        assert rec.created_at

    def test_list_newest_first(self, store):
        first = store.add_quiz_attempt(_record(title="first"))
        second = store.add_quiz_attempt(_record(title="second"))

        ids = [r.id for r in store.list_quiz_attempts("s:alice")]
        assert ids == [second, first]

    def test_owners_are_isolated(self, store):
        attempt_id = store.add_quiz_attempt(_record(owner="s:alice"))
        store.add_quiz_attempt(_record(owner="s:bob"))

        assert len(store.list_quiz_attempts("s:alice")) == 1
        assert store.get_quiz_attempt("s:bob", attempt_id) is None
        assert store.delete_quiz_attempt("s:bob", attempt_id) is False
        assert store.get_quiz_attempt("s:alice", attempt_id) is not None

    def test_delete(self, store):
        attempt_id = store.add_quiz_attempt(_record())

        assert store.delete_quiz_attempt("s:alice", attempt_id) is True
        assert store.get_quiz_attempt("s:alice", attempt_id) is None
        assert store.delete_quiz_attempt("s:alice", attempt_id) is False

    def test_owner_required(self, store):
        with pytest.raises(ValueError):
            store.add_quiz_attempt(_record(owner=""))

    def test_summary(self, store):
        store.add_quiz_attempt(_record(score=2, total=4))
        store.add_quiz_attempt(_record(score=4, total=4))

        assert store.owner_summary("s:alice") == {
            "quizzes": 2,
            "correct": 6,
            "answered": 8,
            "accuracy": 75.0,
        }
        assert store.owner_summary("s:nobody")["accuracy"] == 0.0

    def test_reopen_keeps_rows(self, store):
        from studyforge.db import StudyStore

        store.add_quiz_attempt(_record())
        again = StudyStore(store.db_path)
        assert len(again.list_quiz_attempts("s:alice")) == 1
