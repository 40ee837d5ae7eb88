import os
import logging
import secrets
from pathlib import Path
from dotenv import load_dotenv

log = logging.getLogger("config")

BASE_DIR = Path(__file__).resolve().parent
ENV_PATH = BASE_DIR / ".env"

load_dotenv(dotenv_path=ENV_PATH)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


ENV = os.getenv("ENV", "").lower()
IS_PROD = ENV == "prod"

# -----------------------------
# LLM
# -----------------------------
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "gemini").strip().lower()
LLM_TIMEOUT_SEC = float(os.getenv("LLM_TIMEOUT_SEC", "55"))
GENERATION_TIMEOUT_SEC = float(os.getenv("GENERATION_TIMEOUT_SEC", "60"))

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_API_URL = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4.1-mini")

# local OpenAI-compatible server (Ollama)
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "http://localhost:11434/v1")
DEFAULT_MODEL = os.getenv("DEFAULT_MODEL", "qwen2.5:7b-instruct")

# -----------------------------
# Quiz
# -----------------------------
QUIZ_MODE = os.getenv("QUIZ_MODE", "correct_first").strip().lower()
QUIZ_SHUFFLE = _env_bool("QUIZ_SHUFFLE", True)
QUIZ_DEFAULT_QUESTIONS = int(os.getenv("QUIZ_DEFAULT_QUESTIONS", "10"))
SOURCE_CHARS_MAX = int(os.getenv("SOURCE_CHARS_MAX", "30000"))
PDF_MAX_BYTES = int(os.getenv("PDF_MAX_BYTES", str(8_000_000)))

# -----------------------------
# Storage
# -----------------------------
DB_PATH = os.getenv("DB_PATH", "./data/studyforge.sqlite3")

# -----------------------------
# Web
# -----------------------------
WEB_SESSION_SECRET = os.getenv("WEB_SESSION_SECRET", "")
if not WEB_SESSION_SECRET:
    if IS_PROD:
        raise RuntimeError("WEB_SESSION_SECRET must be set when ENV=prod")
    WEB_SESSION_SECRET = secrets.token_urlsafe(32)
    log.warning("WEB_SESSION_SECRET not set; using a random per-process secret")

RATE_LIMIT_ENABLED = _env_bool("RATE_LIMIT_ENABLED", True)
GENERATE_RATE_LIMIT = os.getenv("GENERATE_RATE_LIMIT", "10/minute")
WEB_HOST = os.getenv("WEB_HOST", "127.0.0.1")
WEB_PORT = int(os.getenv("WEB_PORT", "8000"))

# -----------------------------
# Logging
# -----------------------------
LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()

# -----------------------------
# Discord
# -----------------------------
DISCORD_TOKEN = os.getenv("DISCORD_TOKEN", "")
GUILD_ID = int(os.getenv("GUILD_ID", "0"))

log.debug("BASE_DIR=%s", BASE_DIR)
log.debug("ENV_PATH=%s exists=%s", ENV_PATH, ENV_PATH.exists())
log.debug("LLM_PROVIDER=%s", LLM_PROVIDER)
log.debug("DB_PATH=%s", DB_PATH)
log.debug("QUIZ_MODE=%s QUIZ_SHUFFLE=%s", QUIZ_MODE, QUIZ_SHUFFLE)
