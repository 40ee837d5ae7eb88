# =============================================================================
# CONFTEST - shared fixtures
# =============================================================================
# Fake LLM, temporary store and a FastAPI client wired to both
# =============================================================================

import json
import os
import random
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

# config.py reads the environment at import time
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("WEB_SESSION_SECRET", "test-session-secret")
os.environ.setdefault("LLM_PROVIDER", "local")
os.environ.setdefault("QUIZ_MODE", "correct_first")


# =============================================================================
# HELPERS
# =============================================================================


def quiz_item(
    question: str = "2+2?",
    options: Optional[List[Any]] = None,
    correct: Any = 0,
) -> Dict[str, Any]:
    return {
        "question": question,
        "options": options if options is not None else ["4", "3", "5", "22"],
        "correctAnswer": correct,
    }


def quiz_text(items: List[Dict[str, Any]], *, prefix: str = "", suffix: str = "") -> str:
    return f"{prefix}{json.dumps(items)}{suffix}"


def numbered_quiz(n: int) -> str:
    return quiz_text(
        [quiz_item(f"Question {i + 1}?", [f"right {i}", f"wrong a{i}", f"wrong b{i}", f"wrong c{i}"]) for i in range(n)]
    )


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def rng():
    """Seeded RNG so shuffles are reproducible."""
    return random.Random(1234)


@pytest.fixture
def fake_llm():
    """LLM double; set fake_llm.ask.return_value / side_effect per test."""
    llm = AsyncMock()
    llm.ask = AsyncMock(return_value=numbered_quiz(3))
    llm.provider = "local"
    llm.default_model = "test-model"
    return llm


@pytest.fixture
def store(tmp_path):
    from studyforge.db import StudyStore

    return StudyStore(str(tmp_path / "data" / "test.sqlite3"))


@pytest.fixture
def workspace(fake_llm, store, rng):
    from studyforge.services.quiz_workspace import QuizWorkspace

    return QuizWorkspace(llm=fake_llm, store=store, owner_key="s:test", timeout=5, rng=rng)


@pytest.fixture
def client(fake_llm, store):
    """FastAPI TestClient with the LLM and store swapped for test doubles."""
    from fastapi.testclient import TestClient

    from studyforge.services.quiz_workspace import QuizWorkspace, WorkspaceRegistry
    from studyforge.web.core.deps import get_llm, get_store, get_workspaces
    from studyforge.web.main import app

    registry = WorkspaceRegistry(
        lambda key: QuizWorkspace(llm=fake_llm, store=store, owner_key=key, timeout=5)
    )

    app.dependency_overrides[get_llm] = lambda: fake_llm
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_workspaces] = lambda: registry

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
