import json
import logging
from typing import Any, Dict, Optional

import httpx

from config.settings import settings
from services.llm.base import LLMClient

logger = logging.getLogger(__name__)


class LLMCallError(RuntimeError):
    """Gemini request failed or returned something that is not a JSON object."""


def extract_text(data: Dict[str, Any]) -> str:
    """First candidate's text parts joined; empty string when the response has none."""
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(p.get("text", "") for p in parts)


def parse_json_text(text: str) -> Dict[str, Any]:
    cleaned = text.strip()
    # models occasionally wrap JSON mode output in a markdown fence
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise LLMCallError(f"LLM returned invalid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise LLMCallError("LLM returned JSON that is not an object")
    return parsed


class GeminiClient(LLMClient):
    """Gemini generateContent over httpx, JSON mode."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 base_url: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key or settings.GEMINI_API_KEY or ""
        self.model = model or settings.GEMINI_MODEL
        self.base_url = (base_url or settings.GEMINI_API_BASE_URL).rstrip("/")
        self.timeout = float(timeout or settings.LLM_TIMEOUT)
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=10.0), transport=self._transport)

    async def _call(self, body: dict) -> Dict[str, Any]:
        async with self._client() as client:
            try:
                r = await client.post(self.url, params={"key": self.api_key}, json=body)
                r.raise_for_status()
                data = r.json()
            except httpx.HTTPError as e:
                raise LLMCallError(f"Gemini request failed: {e}") from e
            except ValueError as e:
                raise LLMCallError(f"Gemini returned a non-JSON body: {e}") from e
            logger.debug("gemini raw response: %s", json.dumps(data, ensure_ascii=False)[:2000])
            return data

    async def generate_json(self, system_prompt: str, user_prompt: str,
                            temperature: Optional[float] = None,
                            max_tokens: Optional[int] = None) -> Dict[str, Any]:
        t = settings.LLM_TEMPERATURE if temperature is None else float(temperature)
        mx = settings.LLM_MAX_TOKENS if max_tokens is None else int(max_tokens)

        prompt = (
            "Return ONLY valid JSON (no markdown, no prose).\n"
            f"SYSTEM: {system_prompt}\nUSER: {user_prompt}\n"
        )
        body = {
            "generationConfig": {
                "temperature": t,
                "maxOutputTokens": mx,
                "responseMimeType": "application/json",
            },
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }

        data = await self._call(body)
        text = extract_text(data)
        if not text:
            raise LLMCallError("Gemini response contained no text")
        return parse_json_text(text)
