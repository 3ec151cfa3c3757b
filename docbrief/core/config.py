"""Runtime configuration and environment loading."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_SETTINGS: "Settings | None" = None

DEFAULT_HF_BASE_URL = "https://api-inference.huggingface.co/models"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def reset_settings() -> None:
    """Reset cached settings. Call after changing environment variables."""
    global _SETTINGS
    _SETTINGS = None


@dataclass(frozen=True)
class Settings:
    openai_api_key: str = ""
    huggingface_api_key: str = ""
    jwt_secret: str = "fallback-secret"
    jwt_expire_hours: int = 24
    openai_model: str = "gpt-3.5-turbo"
    openai_base_url: str | None = None
    huggingface_base_url: str = DEFAULT_HF_BASE_URL
    hf_summary_model: str = "facebook/bart-large-cnn"
    hf_text_model: str = "microsoft/DialoGPT-medium"
    provider_timeout: float = 30.0
    provider_max_retries: int = 3
    log_level: str = "INFO"


def load_env_file(path: str, *, override: bool = False) -> None:
    """Load key=value pairs from a .env-style file into os.environ.

    Keeps existing env values unless override=True.
    """
    env_path = Path(path)
    if not env_path.exists():
        return

    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip("'").strip('"')
        if not override and key in os.environ:
            continue
        os.environ[key] = value


def _str_env(name: str, default: str) -> str:
    return os.getenv(name, default).strip() or default


def _int_env(name: str, default: int, *, minimum: int = 1) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got '{raw}'.") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}.")
    return value


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got '{raw}'.") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}.")
    return value


def _log_level_env(name: str, default: str) -> str:
    level = _str_env(name, default).upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"{name} must be one of {', '.join(LOG_LEVELS)}, got '{level}'.")
    return level


def get_settings() -> Settings:
    """Load settings from the env file and environment variables."""
    global _SETTINGS
    if _SETTINGS is not None:
        return _SETTINGS

    env_file = os.getenv("DOCBRIEF_ENV_FILE", ".env")
    load_env_file(env_file)

    _SETTINGS = Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY", "").strip(),
        huggingface_api_key=os.getenv("HUGGINGFACE_API_KEY", "").strip(),
        jwt_secret=_str_env("JWT_SECRET", "fallback-secret"),
        jwt_expire_hours=_int_env("JWT_EXPIRE_HOURS", 24),
        openai_model=_str_env("OPENAI_MODEL", "gpt-3.5-turbo"),
        openai_base_url=os.getenv("OPENAI_BASE_URL", "").strip() or None,
        huggingface_base_url=_str_env("HUGGINGFACE_BASE_URL", DEFAULT_HF_BASE_URL),
        hf_summary_model=_str_env("HF_SUMMARY_MODEL", "facebook/bart-large-cnn"),
        hf_text_model=_str_env("HF_TEXT_MODEL", "microsoft/DialoGPT-medium"),
        provider_timeout=_float_env("PROVIDER_TIMEOUT", 30.0),
        provider_max_retries=_int_env("PROVIDER_MAX_RETRIES", 3),
        log_level=_log_level_env("LOG_LEVEL", "INFO"),
    )
    return _SETTINGS
