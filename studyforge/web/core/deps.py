from __future__ import annotations

import secrets
from functools import lru_cache

from fastapi import Request

import config
from studyforge.db import StudyStore
from studyforge.services.llm import LLMClient, build_llm_client
from studyforge.services.quiz_workspace import QuizWorkspace, WorkspaceRegistry

SESSION_SECRET = config.WEB_SESSION_SECRET
IS_PROD = config.IS_PROD


# -----------------------------
# Singletons
# -----------------------------
@lru_cache(maxsize=1)
def get_store() -> StudyStore:
    return StudyStore(config.DB_PATH)


@lru_cache(maxsize=1)
def get_llm() -> LLMClient:
    return build_llm_client()


@lru_cache(maxsize=1)
def get_workspaces() -> WorkspaceRegistry:
    def _workspace(owner_key: str) -> QuizWorkspace:
        return QuizWorkspace(
            llm=get_llm(),
            store=get_store(),
            owner_key=owner_key,
            mode=config.QUIZ_MODE,
            shuffle=config.QUIZ_SHUFFLE,
            timeout=config.GENERATION_TIMEOUT_SEC,
        )

    return WorkspaceRegistry(_workspace)


# -----------------------------
# Session helpers
# -----------------------------
def sid(request: Request) -> str:
    s = request.session.get("sid")
    if not s:
        s = secrets.token_urlsafe(16)
        request.session["sid"] = s
    return s


def owner_key(request: Request) -> str:
    return f"s:{sid(request)}"
