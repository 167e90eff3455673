"""Environment-driven settings for the safety inspections module.

Values are read on every call so tests can point the module at a
temporary directory with ``monkeypatch.setenv`` alone.
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_TEXT_MODEL = "gemini-3-flash-preview"
DB_FILENAME = "safety_hub.db"
SETTINGS_FILENAME = "settings.json"

_FALSEY = {"0", "false", "no", "off"}


def data_dir() -> Path:
    return Path(os.environ.get("SAFETYHUB_DATA_DIR", "data"))


def db_path() -> Path:
    return data_dir() / DB_FILENAME


def settings_path() -> Path:
    return data_dir() / SETTINGS_FILENAME


def seed_demo_data() -> bool:
    return os.environ.get("SAFETYHUB_SEED_DEMO", "1").strip().lower() not in _FALSEY


def default_locale() -> str:
    return os.environ.get("SAFETYHUB_LOCALE", "zh").strip().lower() or "zh"


def gemini_api_key() -> str | None:
    return os.environ.get("GEMINI_API_KEY") or None


def text_model() -> str:
    return os.environ.get("SAFETYHUB_TEXT_MODEL", DEFAULT_TEXT_MODEL)


def log_level() -> str:
    return os.environ.get("SAFETYHUB_LOG_LEVEL", "INFO").upper()
