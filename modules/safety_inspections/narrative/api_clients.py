"""HTTP client for the hosted text model behind the narrative generator."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .. import config
from ..exceptions import GeneratorUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=5.0)
API_BASE = "https://generativelanguage.googleapis.com/v1beta"


class GeminiClient:
    """Thin async wrapper around the hosted model's ``generateContent`` call."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        model: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = API_BASE,
    ) -> None:
        self.api_key = api_key if api_key is not None else config.gemini_api_key()
        self.model = model or config.text_model()
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            timeout=DEFAULT_TIMEOUT,
            headers={"User-Agent": "Factory-SafetyHub/NarrativeText"},
        )

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    def _url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def generate_text(self, prompt: str, *, response_schema: Optional[Dict[str, Any]] = None) -> str:
        """Return the model's text for ``prompt``; ``""`` when it produced none."""
        if not self.available:
            raise GeneratorUnavailableError("No API key configured for the text model")
        body: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if response_schema is not None:
            body["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": response_schema,
            }
        try:
            r = await self._client.post(self._url(), json=body, headers={"x-goog-api-key": self.api_key})
            r.raise_for_status()
            payload = r.json()
        except httpx.HTTPError as exc:
            raise GeneratorUnavailableError(f"Text model request failed: {exc}") from exc
        except ValueError as exc:
            raise GeneratorUnavailableError("Text model returned a malformed body") from exc
        return _extract_text(payload)

    async def aclose(self) -> None:
        await self._client.aclose()


def _extract_text(payload: Any) -> str:
    if not isinstance(payload, dict):
        raise GeneratorUnavailableError("Text model returned a malformed body")
    candidates = payload.get("candidates") or []
    if not candidates:
        return ""
    parts = ((candidates[0] or {}).get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict)).strip()


__all__ = ["GeminiClient", "DEFAULT_TIMEOUT", "API_BASE"]
