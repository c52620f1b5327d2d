"""
HTTP client for the generative AI providers.

OpenAI-compatible chat completions and Gemini generateContent are both
reached through httpx. Non-2xx responses and transport failures are raised as
CallError variants so the retry layer can classify them.
"""
import re
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..config import Settings
from .errors import AIConfigurationError, OtherCallError, ServiceUnavailable, classify_error

FENCE_RE = re.compile(r"```(?:json)?\n?")


def strip_code_fences(text: str) -> str:
    return FENCE_RE.sub("", text).strip()


def _error_details(response: httpx.Response) -> Tuple[Optional[str], str]:
    """Pull the provider error code and message out of an error body."""
    try:
        body = response.json()
    except ValueError:
        return None, response.text
    err = body.get("error") if isinstance(body, dict) else None
    if not isinstance(err, dict):
        return None, response.text
    # OpenAI: error.code ("insufficient_quota"); Gemini: error.status ("RESOURCE_EXHAUSTED")
    code = err.get("code") if isinstance(err.get("code"), str) else err.get("status")
    return code, err.get("message") or response.text


def raise_for_provider_error(response: httpx.Response) -> None:
    if response.status_code < 400:
        return
    code, message = _error_details(response)
    raise classify_error(response.status_code, code, f"API call failed: {response.status_code} {message}")


class AIClient:
    """Thin async wrapper over the configured AI providers."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def _post(self, url: str, *, headers: Dict[str, str], json: Dict[str, Any]) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.settings.request_timeout_s) as client:
                response = await client.post(url, headers=headers, json=json)
        except (httpx.TimeoutException, httpx.TransportError) as e:
            raise ServiceUnavailable(f"AI provider unreachable: {e}", status=503) from e
        raise_for_provider_error(response)
        try:
            return response.json()
        except ValueError as e:
            raise OtherCallError("AI provider returned invalid JSON", status=response.status_code) from e

    async def chat_completion(
        self,
        messages: List[Dict[str, str]],
        *,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        """OpenAI-compatible chat completion; returns the first choice's text."""
        if not self.settings.openai_api_key:
            raise AIConfigurationError(
                "OPENAI_API_KEY not configured. Set OPENAI_API_KEY in your environment to enable AI generation."
            )
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.settings.openai_api_key}",
        }
        payload = {
            "model": model or self.settings.openai_model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        data = await self._post(f"{self.settings.openai_base_url}/chat/completions", headers=headers, json=payload)
        try:
            return (data["choices"][0]["message"]["content"] or "").strip()
        except (KeyError, IndexError, TypeError) as e:
            raise OtherCallError("Malformed chat completion response") from e

    async def generate_content(self, prompt: str, *, model: Optional[str] = None) -> str:
        """Gemini generateContent; returns the concatenated text parts."""
        if not self.settings.gemini_api_key:
            raise AIConfigurationError(
                "GEMINI_API_KEY not configured. Set GEMINI_API_KEY in your environment to enable AI generation."
            )
        model = model or self.settings.gemini_model
        url = f"{self.settings.gemini_base_url}/models/{model}:generateContent"
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.settings.gemini_api_key,
        }
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        data = await self._post(url, headers=headers, json=payload)
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise OtherCallError("Malformed generateContent response") from e
        return "".join(p.get("text", "") for p in parts).strip()


def get_ai_client(settings: Settings) -> AIClient:
    return AIClient(settings)
