# =============================================================================
# HTTP ENDPOINTS (FastAPI)
# =============================================================================

import pytest


def _generate(client, **form):
    data = {"topic": "Photosynthesis", "count": "3"}
    data.update(form)
    return client.post("/api/quiz/generate", data=data)


def _answer_all(client, quiz, correct=True):
    # correct indices are hidden before grading; pick by the option text instead
    prefix = "right" if correct else "wrong"
    for q in quiz["questions"]:
        idx = next(i for i, o in enumerate(q["options"]) if o.startswith(prefix))
        r = client.post("/api/quiz/select", json={"question_index": q["index"], "option_index": idx})
        assert r.status_code == 200


# =============================================================================
# GENERATE
# =============================================================================


class TestGenerate:
    """POST /api/quiz/generate"""

    def test_topic_generates_quiz(self, client, fake_llm):
        r = _generate(client)

        assert r.status_code == 200
        quiz = r.json()["quiz"]
        assert quiz["state"] == "answering"
        assert quiz["title"] == "Photosynthesis"
        assert len(quiz["questions"]) == 3
        assert all("correct_index" not in q for q in quiz["questions"])
        fake_llm.ask.assert_awaited_once()

    def test_bad_count(self, client, fake_llm):
        for count in ("0", "21", "ten"):
            r = _generate(client, count=count)
            assert r.status_code == 400
            assert "between 1 and 20" in r.json()["error"]
        fake_llm.ask.assert_not_awaited()

    def test_empty_topic(self, client):
        r = _generate(client, topic="  ")
        assert r.status_code == 400

    def test_unknown_mode(self, client):
        r = _generate(client, mode="sideways")
        assert r.status_code == 400

    def test_non_pdf_upload(self, client):
        r = client.post(
            "/api/quiz/generate",
            data={"count": "3"},
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
        assert r.status_code == 400
        assert "PDF" in r.json()["error"]

    def test_oversized_pdf_is_rejected_before_parsing(self, client, fake_llm, monkeypatch):
        import config
        from studyforge.services import pdf_text

        monkeypatch.setattr(config, "PDF_MAX_BYTES", 100)
        monkeypatch.setattr(pdf_text, "pdf_to_text", lambda b: pytest.fail("pdf parsed"))

        r = client.post(
            "/api/quiz/generate",
            data={"count": "3"},
            files={"file": ("big.pdf", b"%PDF" + b"x" * 5000, "application/pdf")},
        )
        assert r.status_code == 400
        assert "too large" in r.json()["error"]
        fake_llm.ask.assert_not_awaited()

    def test_parse_failure_reason(self, client, fake_llm):
        fake_llm.ask.return_value = "Sorry, no quiz today."
        r = _generate(client)

        assert r.status_code == 502
        assert r.json()["reason"] == "no_array"

    def test_generation_failure(self, client, fake_llm):
        from studyforge.errors import GenerationError

        fake_llm.ask.side_effect = GenerationError("LLM error (500).")
        r = _generate(client)
        assert r.status_code == 502

    def test_failure_keeps_previous_quiz(self, client, fake_llm):
        _generate(client)
        fake_llm.ask.return_value = "[]"

        r = _generate(client, topic="Other")
        assert r.status_code == 502
        assert r.json()["reason"] == "empty"

        quiz = client.get("/api/quiz").json()["quiz"]
        assert quiz["title"] == "Photosynthesis"
        assert len(quiz["questions"]) == 3


# =============================================================================
# ANSWER / SUBMIT
# =============================================================================


class TestQuizFlow:
    """select -> submit -> history"""

    def test_empty_quiz(self, client):
        quiz = client.get("/api/quiz").json()["quiz"]
        assert quiz["state"] == "empty"

    def test_full_flow_saves_attempt(self, client):
        quiz = _generate(client).json()["quiz"]
        _answer_all(client, quiz)

        r = client.post("/api/quiz/submit")
        body = r.json()

        assert r.status_code == 200
        assert body["score"] == 3
        assert body["total"] == 3
        assert body["saved"] is True
        assert body["quiz"]["state"] == "graded"

        history = client.get("/api/history/quizzes").json()
        assert len(history["items"]) == 1
        assert history["items"][0]["score"] == 3
        assert history["summary"]["quizzes"] == 1

    def test_incomplete_submit(self, client):
        _generate(client)
        client.post("/api/quiz/select", json={"question_index": 1, "option_index": 0})

        r = client.post("/api/quiz/submit")
        assert r.status_code == 400
        assert r.json()["unanswered"] == [0, 2]
        assert client.get("/api/quiz").json()["quiz"]["state"] == "answering"

    def test_select_validation(self, client):
        _generate(client)

        r = client.post("/api/quiz/select", json={"question_index": "0", "option_index": 1})
        assert r.status_code == 400

        r = client.post("/api/quiz/select", json={"question_index": 9, "option_index": 1})
        assert r.status_code == 400

    def test_select_after_submit_is_ignored(self, client):
        quiz = _generate(client).json()["quiz"]
        _answer_all(client, quiz, correct=False)
        client.post("/api/quiz/submit")

        r = client.post("/api/quiz/select", json={"question_index": 0, "option_index": 0})
        assert r.status_code == 200
        assert r.json()["ok"] is False
        assert r.json()["quiz"]["score"] == 0

    def test_submit_without_quiz(self, client):
        r = client.post("/api/quiz/submit")
        assert r.status_code == 409

    def test_cancel_when_idle(self, client):
        r = client.post("/api/quiz/cancel")
        assert r.json() == {"ok": True, "cancelled": False}


# =============================================================================
# HISTORY
# =============================================================================


class TestHistory:
    """GET / DELETE /api/history/quizzes"""

    def _saved_id(self, client):
        quiz = _generate(client).json()["quiz"]
        _answer_all(client, quiz)
        return client.post("/api/quiz/submit").json()["attempt_id"]

    def test_get_and_delete(self, client):
        attempt_id = self._saved_id(client)

        r = client.get(f"/api/history/quizzes/{attempt_id}")
        assert r.status_code == 200
        assert r.json()["title"] == "Photosynthesis"

        assert client.delete(f"/api/history/quizzes/{attempt_id}").status_code == 200
        assert client.get(f"/api/history/quizzes/{attempt_id}").status_code == 404

    def test_other_session_cannot_see_attempt(self, client):
        from fastapi.testclient import TestClient

        attempt_id = self._saved_id(client)

        with TestClient(client.app) as other:
            assert other.get(f"/api/history/quizzes/{attempt_id}").status_code == 404
            assert other.delete(f"/api/history/quizzes/{attempt_id}").status_code == 404
            assert other.get("/api/history/quizzes").json()["items"] == []


# =============================================================================
# FLASHCARDS
# =============================================================================


class TestFlashcards:
    """POST /api/flashcards/generate"""

    def test_notes(self, client, fake_llm):
        fake_llm.ask.return_value = '[{"question": "Q?", "answer": "A"}]'
        r = client.post("/api/flashcards/generate", data={"notes": "cells and stuff"})

        assert r.status_code == 200
        assert r.json()["cards"] == [{"question": "Q?", "answer": "A"}]

    def test_empty_notes(self, client):
        r = client.post("/api/flashcards/generate", data={"notes": ""})
        assert r.status_code == 400

    def test_oversized_pdf(self, client, fake_llm, monkeypatch):
        import config

        monkeypatch.setattr(config, "PDF_MAX_BYTES", 100)
        r = client.post(
            "/api/flashcards/generate",
            files={"file": ("notes.pdf", b"x" * 1000, "application/pdf")},
        )
        assert r.status_code == 400
        assert "too large" in r.json()["error"]
        fake_llm.ask.assert_not_awaited()

    def test_unreadable_reply(self, client, fake_llm):
        fake_llm.ask.return_value = "nope"
        r = client.post("/api/flashcards/generate", data={"notes": "n"})
        assert r.status_code == 502
        assert r.json()["reason"] == "no_array"


# =============================================================================
# MIDDLEWARE
# =============================================================================


class TestMiddleware:
    """Security headers and the same-origin guard."""

    def test_security_headers(self, client):
        r = client.get("/healthz")
        assert r.headers["X-Frame-Options"] == "DENY"
        assert r.headers["X-Content-Type-Options"] == "nosniff"

    def test_cross_origin_post_blocked(self, client):
        r = client.post("/api/quiz/cancel", headers={"origin": "https://evil.example"})
        assert r.status_code == 403

    def test_same_origin_post_allowed(self, client):
        r = client.post("/api/quiz/cancel", headers={"origin": "http://testserver"})
        assert r.status_code == 200
