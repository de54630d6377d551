"""Environment-backed configuration getters.

Values are read on every call so tests can patch ``os.environ``; required
values raise ConfigurationError (rendered as 503) instead of failing at import.
"""

import os
from pathlib import Path

from services.errors import ConfigurationError

DEFAULT_TWELVE_LABS_BASE_URL = "https://api.twelvelabs.io/v1.3"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_CLIP_OUTPUT_DIR = "tmp/generated-clips"


def _env(name: str) -> str:
    return os.environ.get(name, "").strip()


def _require(name: str) -> str:
    value = _env(name)
    if not value:
        raise ConfigurationError(f"{name} is not set")
    return value


def get_twelve_labs_api_key() -> str:
    return _require("TWELVE_LABS_API_KEY")


def get_twelve_labs_base_url() -> str:
    return _env("TWELVE_LABS_BASE_URL") or DEFAULT_TWELVE_LABS_BASE_URL


def get_index_id(override: str | None = None) -> str:
    """Index to upload into and search; an explicit override wins over TWELVE_LABS_INDEX_ID."""
    if override and override.strip():
        return override.strip()
    return _require("TWELVE_LABS_INDEX_ID")


def get_openai_model() -> str:
    return _env("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL


def get_clip_output_dir() -> Path:
    path = Path(_env("CLIP_OUTPUT_DIR") or DEFAULT_CLIP_OUTPUT_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_ffmpeg_binary() -> str:
    return _env("FFMPEG_BINARY") or "ffmpeg"


def get_twilio_credentials() -> tuple[str, str, str]:
    """(account_sid, auth_token, sender_number) for the SMS adapter."""
    return (
        _require("TWILIO_ACCOUNT_SID"),
        _require("TWILIO_AUTH_TOKEN"),
        _require("TWILIO_PHONE_NUMBER"),
    )


def get_cors_origins() -> list[str]:
    raw = _env("CORS_ALLOW_ORIGINS")
    if not raw:
        return ["*"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_openai_api_key() -> str:
    return _require("OPENAI_API_KEY")
