from __future__ import annotations

import logging

from fastapi.responses import JSONResponse

from studyforge.errors import (
    GenerationCancelledError,
    GenerationError,
    GenerationInProgressError,
    GenerationTimeoutError,
    IncompleteAnswersError,
    InvalidStateError,
    ParseError,
    SourceError,
)

log = logging.getLogger("StudyForge")


def error_response(exc: Exception) -> JSONResponse:
    """Map a StudyForge error (or a ValueError from input checks) to a JSON error reply."""
    if isinstance(exc, IncompleteAnswersError):
        return JSONResponse(
            {"error": str(exc), "unanswered": exc.unanswered, "total": exc.total},
            status_code=400,
        )
    if isinstance(exc, (SourceError, ValueError)):
        return JSONResponse({"error": str(exc)}, status_code=400)
    if isinstance(exc, (GenerationInProgressError, GenerationCancelledError, InvalidStateError)):
        return JSONResponse({"error": str(exc)}, status_code=409)
    if isinstance(exc, GenerationTimeoutError):
        return JSONResponse({"error": str(exc)}, status_code=504)
    if isinstance(exc, ParseError):
        return JSONResponse(
            {"error": "The AI response could not be read. Please try again.", "reason": exc.reason.value},
            status_code=502,
        )
    if isinstance(exc, GenerationError):
        return JSONResponse({"error": str(exc) or "Generation failed."}, status_code=502)

    log.exception("Unhandled error in web route", exc_info=exc)
    return JSONResponse({"error": "Internal error."}, status_code=500)
