from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import config

FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(filename)s:%(lineno)d] %(message)s"

# third-party loggers kept at WARNING; the discord ones also stay off the console
NOISY_LOGGERS = {
    "discord": False,
    "discord.client": False,
    "discord.gateway": False,
    "discord.http": False,
    "httpx": True,
    "httpcore": True,
    "uvicorn.access": True,
}


class _LevelColors(logging.Formatter):
    PALETTE = {
        logging.DEBUG: "90",
        logging.INFO: "94",
        logging.WARNING: "93",
        logging.ERROR: "91",
        logging.CRITICAL: "95",
    }

    def format(self, record: logging.LogRecord) -> str:
        code = self.PALETTE.get(record.levelno)
        line = super().format(record)
        if not code:
            return line
        return f"\033[{code}m{record.levelname:<8}\033[0m {line}"


class _GatewayChatter(logging.Filter):
    """Drops discord.py connection banners that repeat on every reconnect."""

    PHRASES = (
        "logging in using static token",
        "Shard ID",
        "has connected to Gateway",
    )

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        return not any(p in msg for p in self.PHRASES)


def _level(name: Optional[str], fallback: int) -> int:
    value = logging.getLevelName((name or "").upper())
    return value if isinstance(value, int) else fallback


def setup_logging(
    *,
    log_dir: Optional[str] = None,
    log_file: str = "studyforge.log",
    console_level: Optional[str] = None,
) -> Path:
    """
    Console (coloured) + rotating file logging for the bot and the web app.
    Returns the path of the log file.
    """
    directory = Path(log_dir or config.LOG_DIR)
    directory.mkdir(parents=True, exist_ok=True)
    log_path = directory / log_file

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(logging.DEBUG)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(_level(console_level or config.LOG_LEVEL, logging.INFO))
    console.setFormatter(_LevelColors("%(message)s"))
    console.addFilter(_GatewayChatter())
    root.addHandler(console)

    rotating = logging.handlers.RotatingFileHandler(
        str(log_path),
        maxBytes=5 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    rotating.setLevel(logging.DEBUG)
    rotating.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(rotating)

    for name, propagate in NOISY_LOGGERS.items():
        noisy = logging.getLogger(name)
        noisy.setLevel(logging.WARNING)
        noisy.propagate = propagate

    root.debug("Logging to %s", log_path.resolve())
    return log_path
