"""Runtime settings, read once from the environment at process start."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_ALLOWED_ORIGINS = (
    "https://joshuasevy.com",
    "https://www.joshuasevy.com",
    "http://localhost:3000",
    "http://localhost:4000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
)
DEFAULT_BASE_URL = "https://api.joshuasevy.com"
DEFAULT_TROPHY_SERVICE_URL = "https://github-profile-trophy.vercel.app/"


def _split_origins(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return DEFAULT_ALLOWED_ORIGINS
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


def _as_bool(raw: str | None) -> bool:
    return (raw or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    supabase_url: str = ""
    supabase_anon_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    allowed_origins: tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    trophy_service_url: str = DEFAULT_TROPHY_SERVICE_URL
    http_timeout: float = 30.0
    port: int = 3000
    log_level: str = "INFO"
    debug: bool = False

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            supabase_url=(env.get("SUPABASE_URL") or "").rstrip("/"),
            supabase_anon_key=env.get("SUPABASE_ANON_KEY") or "",
            base_url=(env.get("BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
            allowed_origins=_split_origins(env.get("ALLOWED_ORIGINS")),
            trophy_service_url=env.get("TROPHY_SERVICE_URL") or DEFAULT_TROPHY_SERVICE_URL,
            http_timeout=float(env.get("HTTP_TIMEOUT") or 30.0),
            port=int(env.get("PORT") or 3000),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
            debug=_as_bool(env.get("DEBUG")),
        )


def load_settings() -> Settings:
    """Load `.env` (if present) into the process environment, then build Settings."""
    load_dotenv()
    return Settings.from_env()


__all__ = ["Settings", "load_settings", "DEFAULT_ALLOWED_ORIGINS"]
