"""Runtime configuration loaded from the environment (and ``.env``)."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from .db.utils import resolve_sqlite_url

load_dotenv()

# Project root directory (repo root)
ROOT_DIR = Path(__file__).resolve().parents[1]


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _resolve_path(raw: str) -> Path:
    path = Path(raw)
    if not path.is_absolute():
        path = ROOT_DIR / path
    return path.resolve()


class Settings:
    DB_URL = resolve_sqlite_url(os.getenv("DB_URL", "sqlite:///./dev.db"), ROOT_DIR)
    DB_ECHO = _env_bool("DB_ECHO", False)

    LOCAL_STORAGE_PATH = _resolve_path(
        os.getenv("LOCAL_STORAGE_PATH", "./.luckydraw/local_storage.json")
    )
    # getAll() falls back to the local store when the remote answers with zero rows
    FALLBACK_ON_EMPTY = _env_bool("FALLBACK_ON_EMPTY", True)

    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Install a basic root handler for scripts and interactive use."""
    logging.basicConfig(
        level=level or settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
