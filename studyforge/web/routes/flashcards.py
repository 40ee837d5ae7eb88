from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse

import config
from studyforge.errors import StudyForgeError
from studyforge.services.flashcards_gen import generate_flashcards
from studyforge.services.llm import LLMClient
from studyforge.services.pdf_text import source_from_pdf
from studyforge.web.core.deps import get_llm
from studyforge.web.core.ratelimit import limiter
from studyforge.web.core.responses import error_response

router = APIRouter(prefix="/api/flashcards", tags=["flashcards"])


@router.post("/generate")
@limiter.limit(config.GENERATE_RATE_LIMIT)
async def generate(
    request: Request,
    notes: str = Form(""),
    file: Optional[UploadFile] = File(None),
    llm: LLMClient = Depends(get_llm),
):
    try:
        if file is not None and (file.filename or "").strip():
            source = source_from_pdf(
                file.filename,
                # one byte over the cap is enough for source_from_pdf to reject it
                await file.read(config.PDF_MAX_BYTES + 1),
                max_bytes=config.PDF_MAX_BYTES,
                max_chars=config.SOURCE_CHARS_MAX,
            )
            notes = source.text
        cards = await generate_flashcards(llm, notes=notes)
    except (StudyForgeError, ValueError) as e:
        return error_response(e)

    return JSONResponse({"ok": True, "cards": [c.to_dict() for c in cards]})
