from __future__ import annotations

import pytest

from modules.safety_inspections.api import reset_container
from utils.state import AppState


@pytest.fixture(autouse=True)
def isolated_hub(tmp_path, monkeypatch):
    monkeypatch.setenv("SAFETYHUB_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("SAFETYHUB_LOCALE", "en")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("SAFETYHUB_USER_ID", raising=False)
    monkeypatch.delenv("SAFETYHUB_USER_NAME", raising=False)
    reset_container()
    AppState.clear()
    yield tmp_path
    reset_container()
    AppState.clear()
