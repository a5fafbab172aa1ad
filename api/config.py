"""Application configuration and constants."""
import logging
import os
from pathlib import Path


def _parse_int_env(name: str, default: int) -> int:
    """Parse integer from environment variable."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _parse_bool_env(name: str, default: bool) -> bool:
    """Parse boolean flag ("1", "true", "yes", "on") from environment variable."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _parse_log_level(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else default


# Directories
DATA_DIR = Path(os.environ.get("QUIZ_DATA_DIR", Path.cwd() / "data"))
DATA_DIR.mkdir(parents=True, exist_ok=True)

UPLOADS_DIR = Path(os.environ.get("UPLOADS_DIR", DATA_DIR / "uploads"))
UPLOADS_DIR.mkdir(parents=True, exist_ok=True)

# Database
DATABASE_URL = os.environ.get("DATABASE_URL", f"sqlite:///{DATA_DIR / 'quiz.db'}")

# Quiz behaviour
RANDOM_BATCH_SIZE = _parse_int_env("RANDOM_BATCH_SIZE", 30)
SEED_DEMO_DATA = _parse_bool_env("SEED_DEMO_DATA", True)
UPLOAD_MAX_SIZE_BYTES = 5 * 1024 * 1024  # 5 MB

# Logging
LOG_LEVEL = _parse_log_level("QUIZ_LOG_LEVEL", logging.INFO)
