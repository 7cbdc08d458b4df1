"""Environment-backed settings for the relay server."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_LM_BASE_URL = "http://localhost:1234/v1"
DEFAULT_LM_MODEL = "google/gemma-3-4b"


def _optional_int(raw: Optional[str]) -> Optional[int]:
    if raw is None or not raw.strip():
        return None
    return int(raw)


@dataclass(frozen=True)
class Settings:
    """Application settings loaded once at startup.

    Attributes:
        lm_base_url: Base URL of the OpenAI-compatible model server.
        lm_model: Model identifier sent with every chat request.
        lm_api_key: API key for the model server (local servers ignore it).
        host: Interface the HTTP server binds to.
        port: Port the HTTP server listens on.
        session_max_turns: Optional cap on stored turns per session.
        log_level: Root logging level name.
    """

    lm_base_url: str = DEFAULT_LM_BASE_URL
    lm_model: str = DEFAULT_LM_MODEL
    lm_api_key: str = "lm-studio"
    host: str = "0.0.0.0"
    port: int = 3000
    session_max_turns: Optional[int] = None
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read settings from the environment, loading a .env file if present."""
    load_dotenv()
    return Settings(
        lm_base_url=os.getenv("LM_BASE_URL", DEFAULT_LM_BASE_URL).rstrip("/"),
        lm_model=os.getenv("LM_MODEL", DEFAULT_LM_MODEL),
        lm_api_key=os.getenv("LM_API_KEY", "lm-studio"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        session_max_turns=_optional_int(os.getenv("SESSION_MAX_TURNS")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
