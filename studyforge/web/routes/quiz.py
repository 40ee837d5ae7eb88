from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse

import config
from studyforge.errors import StudyForgeError
from studyforge.services.pdf_text import source_from_pdf, source_from_topic
from studyforge.services.quiz_parse import MAX_QUESTIONS, MIN_QUESTIONS
from studyforge.services.quiz_workspace import WorkspaceRegistry
from studyforge.web.core.deps import get_workspaces, owner_key
from studyforge.web.core.ratelimit import limiter
from studyforge.web.core.responses import error_response

router = APIRouter(prefix="/api/quiz", tags=["quiz"])


def _parse_count(raw: str) -> int:
    s = (raw or "").strip()
    if not s.lstrip("-").isdigit():
        raise ValueError(f"Please enter a number between {MIN_QUESTIONS} and {MAX_QUESTIONS}.")
    n = int(s)
    if n < MIN_QUESTIONS or n > MAX_QUESTIONS:
        raise ValueError(f"Please enter a number between {MIN_QUESTIONS} and {MAX_QUESTIONS}.")
    return n


def _is_index(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


@router.post("/generate")
@limiter.limit(config.GENERATE_RATE_LIMIT)
async def generate_quiz(
    request: Request,
    topic: str = Form(""),
    count: str = Form(str(config.QUIZ_DEFAULT_QUESTIONS)),
    mode: str = Form(""),
    file: Optional[UploadFile] = File(None),
    workspaces: WorkspaceRegistry = Depends(get_workspaces),
):
    ws = workspaces.get(owner_key(request))

    try:
        n = _parse_count(count)
        if file is not None and (file.filename or "").strip():
            # one byte over the cap is enough for source_from_pdf to reject it
            pdf_bytes = await file.read(config.PDF_MAX_BYTES + 1)
            source = source_from_pdf(
                file.filename,
                pdf_bytes,
                max_bytes=config.PDF_MAX_BYTES,
                max_chars=config.SOURCE_CHARS_MAX,
            )
        else:
            source = source_from_topic(topic, max_chars=config.SOURCE_CHARS_MAX)

        await ws.generate(source, n, mode or None)
    except (StudyForgeError, ValueError) as e:
        return error_response(e)

    return JSONResponse({"ok": True, "quiz": ws.snapshot()})


@router.get("")
async def current_quiz(request: Request, workspaces: WorkspaceRegistry = Depends(get_workspaces)):
    ws = workspaces.get(owner_key(request))
    return JSONResponse({"ok": True, "quiz": ws.snapshot()})


@router.post("/select")
async def select_option(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    workspaces: WorkspaceRegistry = Depends(get_workspaces),
):
    qi = payload.get("question_index")
    oi = payload.get("option_index")
    if not _is_index(qi) or not _is_index(oi):
        return JSONResponse({"error": "question_index and option_index must be integers"}, status_code=400)

    ws = workspaces.get(owner_key(request))
    try:
        applied = ws.select_option(qi, oi)
    except ValueError as e:
        return error_response(e)

    return JSONResponse({"ok": applied, "quiz": ws.snapshot()})


@router.post("/submit")
async def submit_quiz(request: Request, workspaces: WorkspaceRegistry = Depends(get_workspaces)):
    ws = workspaces.get(owner_key(request))
    try:
        result = ws.submit()
    except StudyForgeError as e:
        return error_response(e)

    return JSONResponse({"ok": True, **result, "quiz": ws.snapshot()})


@router.post("/cancel")
async def cancel_generation(request: Request, workspaces: WorkspaceRegistry = Depends(get_workspaces)):
    ws = workspaces.get(owner_key(request))
    return JSONResponse({"ok": True, "cancelled": ws.cancel()})
