from __future__ import annotations
import os
from dataclasses import dataclass
from dotenv import load_dotenv


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return float(raw)


@dataclass(frozen=True)
class Settings:
    google_api_key: str | None = None
    gemini_model: str = "gemini-2.0-flash"
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta"

    max_tokens: int = 1024
    temperature: float = 0.2
    request_timeout: float | None = None  # None = wait for the service

    fetch_delay_seconds: float = 0.75
    log_level: str = "INFO"


def load_settings(env_file: str | None = None) -> Settings:
    """
    Build Settings from the process environment (after loading .env).
    Read once at startup and pass the result to the components that need it.
    """
    load_dotenv(env_file)
    return Settings(
        google_api_key=os.getenv("GOOGLE_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
        gemini_api_base=os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta").rstrip("/"),
        max_tokens=int(os.getenv("MAX_TOKENS", 1024)),
        temperature=float(os.getenv("TEMPERATURE", 0.2)),
        request_timeout=_optional_float("REQUEST_TIMEOUT"),
        fetch_delay_seconds=float(os.getenv("FETCH_DELAY_SECONDS", 0.75)),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
