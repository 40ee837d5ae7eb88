from __future__ import annotations

from urllib.parse import urlparse

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import Response
from starlette.status import HTTP_403_FORBIDDEN

import config
from studyforge.constants import APP_VERSION
from studyforge.web.core.deps import IS_PROD, SESSION_SECRET
from studyforge.web.core.ratelimit import limiter
from studyforge.web.routes.flashcards import router as flashcards_router
from studyforge.web.routes.history import router as history_router
from studyforge.web.routes.quiz import router as quiz_router

# -----------------------------
# App
# -----------------------------
app = FastAPI(title="StudyForge", version=APP_VERSION)

# -----------------------------
# Rate limiting
# -----------------------------
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(RateLimitExceeded)
async def ratelimit_handler(request: Request, exc: RateLimitExceeded):
    return PlainTextResponse("Too Many Requests", status_code=429)


# -----------------------------
# Sessions
# -----------------------------
app.add_middleware(
    SessionMiddleware,
    secret_key=SESSION_SECRET,
    same_site="lax",
    https_only=bool(IS_PROD),
    max_age=60 * 60 * 24 * 7,  # 7 days
)


# -----------------------------
# CSRF origin guard (same-origin)
# -----------------------------
@app.middleware("http")
async def csrf_same_host_guard(request: Request, call_next):
    if request.method in ("POST", "PUT", "DELETE", "PATCH"):
        origin = request.headers.get("origin")
        referer = request.headers.get("referer")
        source = origin or referer

        # requests without either header (curl, server-to-server) pass through
        if source:
            base_host = urlparse(str(request.base_url)).netloc
            if urlparse(source).netloc != base_host:
                return Response("CSRF blocked", status_code=HTTP_403_FORBIDDEN)

    return await call_next(request)


# -----------------------------
# Security headers
# -----------------------------
@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)

    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Permissions-Policy"] = "camera=(), microphone=(), geolocation=()"
    response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"
    return response


@app.get("/healthz")
async def healthz():
    return {"ok": True, "version": APP_VERSION}


# -----------------------------
# Routes
# -----------------------------
app.include_router(quiz_router)
app.include_router(history_router)
app.include_router(flashcards_router)


def run() -> None:
    import uvicorn

    from studyforge.utils.logger_setup import setup_logging

    setup_logging(log_file="studyforge-web.log")
    uvicorn.run(app, host=config.WEB_HOST, port=config.WEB_PORT, log_config=None)
