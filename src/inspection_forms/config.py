from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_PLACEHOLDER_URLS = {"your-supabase-project-url", "https://your-project.supabase.co"}
_PLACEHOLDER_KEYS = {"your-supabase-anon-key", "your-anon-key"}
_MIN_KEY_LENGTH = 20


def _env_first(*names: str) -> str:
    for name in names:
        value = (os.getenv(name) or "").strip()
        if value:
            return value
    return ""


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def is_valid_supabase_url(url: Optional[str]) -> bool:
    t = str(url or "").strip()
    if not t or t in _PLACEHOLDER_URLS:
        return False
    parsed = urlparse(t)
    host = (parsed.hostname or "").lower()
    return parsed.scheme == "https" and host.endswith(".supabase.co") and host != ".supabase.co"


def is_valid_supabase_key(key: Optional[str]) -> bool:
    t = str(key or "").strip()
    return bool(t) and t not in _PLACEHOLDER_KEYS and len(t) > _MIN_KEY_LENGTH


@dataclass(frozen=True)
class Settings:
    supabase_url: str = ""
    supabase_key: str = ""
    data_dir: Path = Path(".data")
    generate_delay_sec: float = 1.5
    modify_delay_sec: float = 1.0
    circuit_failure_threshold: int = 3
    circuit_reset_sec: float = 30.0
    log_level: str = "INFO"

    @property
    def remote_configured(self) -> bool:
        return is_valid_supabase_url(self.supabase_url) and is_valid_supabase_key(self.supabase_key)

    @classmethod
    def from_env(cls, *, env_dir: Optional[Path] = None) -> "Settings":
        """
        Build settings from the process environment.

        `.env` and `.env.local` under `env_dir` (when given) are loaded first without
        overriding variables that are already set.
        """
        if env_dir is not None:
            load_dotenv(env_dir / ".env", override=False)
            load_dotenv(env_dir / ".env.local", override=False)

        return cls(
            supabase_url=_env_first("SUPABASE_URL", "VITE_SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
            supabase_key=_env_first(
                "SUPABASE_ANON_KEY",
                "SUPABASE_SERVICE_ROLE_KEY",
                "VITE_SUPABASE_ANON_KEY",
                "NEXT_PUBLIC_SUPABASE_ANON_KEY",
            ),
            data_dir=Path(_env_first("INSPECTION_FORMS_DATA_DIR") or ".data"),
            generate_delay_sec=max(0.0, _env_float("INSPECTION_FORMS_GENERATE_DELAY_SEC", 1.5)),
            modify_delay_sec=max(0.0, _env_float("INSPECTION_FORMS_MODIFY_DELAY_SEC", 1.0)),
            circuit_failure_threshold=max(1, _env_int("INSPECTION_FORMS_CIRCUIT_FAILURES", 3)),
            circuit_reset_sec=max(0.0, _env_float("INSPECTION_FORMS_CIRCUIT_RESET_SEC", 30.0)),
            log_level=(_env_first("INSPECTION_FORMS_LOG_LEVEL") or "INFO").upper(),
        )


def configure_logging(settings: Settings) -> None:
    level = getattr(logging, settings.log_level, logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("inspection_forms").setLevel(level)
    if not settings.remote_configured:
        logger.warning("Supabase environment variables not found or invalid; using local storage")
