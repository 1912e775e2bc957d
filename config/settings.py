from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


@dataclass(frozen=True)
class Settings:
    db_path: str
    run_env: str
    log_level: str

    # Principal used by the CLI when --owner is not given
    owner_email: str | None

    # Listing/pagination
    default_page_size: int
    max_page_size: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    default_page_size = int(os.getenv("DEFAULT_PAGE_SIZE", "50"))
    max_page_size = int(os.getenv("MAX_PAGE_SIZE", "100"))
    if not 1 <= default_page_size <= max_page_size:
        raise RuntimeError(
            f"DEFAULT_PAGE_SIZE must be between 1 and MAX_PAGE_SIZE ({max_page_size})"
        )
    owner_email = (os.getenv("OWNER_EMAIL") or "").strip() or None
    return Settings(
        db_path=os.getenv("DB_PATH", "reachpilot.db"),
        run_env=os.getenv("RUN_ENV", "local"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        owner_email=owner_email,
        default_page_size=default_page_size,
        max_page_size=max_page_size,
    )
