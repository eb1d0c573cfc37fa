# yatra/core/config.py
"""
Settings read from the environment (and ``.env`` at the project root).

Everything is a module constant resolved at import time. ``MONGODB_URL`` is
the only required value; the app refuses to start without it.
"""
import inspect
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from loguru import logger

_env_file = Path(__file__).resolve().parents[2] / ".env"
if _env_file.is_file():
    logger.info(f"Loading environment variables from: {_env_file}")
    load_dotenv(dotenv_path=_env_file)
else:
    logger.debug(f"No .env at {_env_file}, using process environment only.")


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid {name}={raw!r}. Using default: {default}.")
        return default


def _bool_from_env(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# --- Logging ---
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE_PATH: str = os.getenv("LOG_FILE_PATH", "logs/yatra_{time:YYYY-MM-DD}.log")
LOG_ROTATION: str = os.getenv("LOG_ROTATION", "1 day")
LOG_RETENTION: str = os.getenv("LOG_RETENTION", "7 days")
LOG_SERIALIZE: bool = _bool_from_env("LOG_SERIALIZE")
LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> "
    "<level>{level: <8}</level> "
    "<cyan>{name}:{line}</cyan> <level>{message}</level>"
)

# stdlib loggers whose records are rerouted into loguru
INTERCEPTED_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "fastapi", "pymongo")


class InterceptHandler(logging.Handler):
    """Forwards standard ``logging`` records to loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1
        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _add_file_sink(path: str, level: str) -> None:
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"File logging disabled, cannot create directory for {path}: {e}")
        return
    logger.add(
        path,
        level=level,
        format=LOG_FORMAT,
        rotation=LOG_ROTATION,
        retention=LOG_RETENTION,
        serialize=LOG_SERIALIZE,
        enqueue=True,
        diagnose=False,
        encoding="utf-8",
    )


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Install the stderr and file sinks and route stdlib logging through loguru.

    ``level`` and ``log_file`` default to ``LOG_LEVEL`` and ``LOG_FILE_PATH``;
    an empty ``log_file`` disables the file sink.
    """
    level = (level or LOG_LEVEL).upper()
    log_file = LOG_FILE_PATH if log_file is None else log_file

    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT, colorize=True)
    if log_file:
        _add_file_sink(log_file, level)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in INTERCEPTED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False

    logger.info(f"Logging configured: level={level} file={log_file or '-'}")


# --- Database ---
MONGODB_URL: str = os.getenv("MONGODB_URL")
if not MONGODB_URL:
    logger.critical("FATAL: MONGODB_URL environment variable is not set.")
    raise ValueError("MONGODB_URL environment variable is not set.")

# database name defaults to the path segment of the URL, e.g. mongodb://host/yatra
_url_db_name = MONGODB_URL.split("://", 1)[-1].partition("/")[2].split("?")[0]
DATABASE_NAME: str = os.getenv("DATABASE_NAME") or _url_db_name or "yatra_db"

# --- Booking number sequence ---
BOOKING_NUMBER_PREFIX: str = os.getenv("BOOKING_NUMBER_PREFIX", "JY")
BOOKING_NUMBER_SEQUENCE: str = os.getenv("BOOKING_NUMBER_SEQUENCE", "bookingNumber")
BOOKING_NUMBER_START: int = _int_from_env("BOOKING_NUMBER_START", 1000)
BOOKING_NUMBER_WIDTH: int = _int_from_env("BOOKING_NUMBER_WIDTH", 6)

# --- HTTP ---
CORS_ORIGINS: List[str] = [
    origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
]
RATE_LIMIT_ENABLED: bool = _bool_from_env("RATE_LIMIT_ENABLED", default=True)
RATE_LIMIT_STORAGE_URI: str = os.getenv("RATE_LIMIT_STORAGE_URI", "memory://")

logger.info(f"Database name: {DATABASE_NAME}")
logger.info(
    f"Booking numbers: prefix={BOOKING_NUMBER_PREFIX} sequence={BOOKING_NUMBER_SEQUENCE} "
    f"start={BOOKING_NUMBER_START} width={BOOKING_NUMBER_WIDTH}"
)
