from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from studyforge.db import StudyStore
from studyforge.web.core.deps import get_store, owner_key
from studyforge.web.core.ratelimit import limiter

router = APIRouter(prefix="/api/history", tags=["history"])


@router.get("/quizzes")
@limiter.limit("60/minute")
def list_quizzes(
    request: Request,
    limit: int = Query(default=50, ge=1, le=200),
    store: StudyStore = Depends(get_store),
):
    owner = owner_key(request)
    items = [r.to_dict() for r in store.list_quiz_attempts(owner, limit=limit)]
    return JSONResponse({"items": items, "summary": store.owner_summary(owner)})


@router.get("/quizzes/{attempt_id}")
def get_quiz(request: Request, attempt_id: int, store: StudyStore = Depends(get_store)):
    rec = store.get_quiz_attempt(owner_key(request), attempt_id)
    if rec is None:
        return JSONResponse({"error": "Quiz not found."}, status_code=404)
    return JSONResponse(rec.to_dict())


@router.delete("/quizzes/{attempt_id}")
def delete_quiz(request: Request, attempt_id: int, store: StudyStore = Depends(get_store)):
    if not store.delete_quiz_attempt(owner_key(request), attempt_id):
        return JSONResponse({"error": "Quiz not found."}, status_code=404)
    return JSONResponse({"ok": True})
