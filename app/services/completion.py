"""Gemini chat completion client."""

import logging

import requests

from app.errors import CompletionFailure, CompletionNotConfigured

logger = logging.getLogger("campus_connect")


class GeminiCompletionService:
    """Sends a single user message to the Gemini generateContent API."""

    def __init__(self, api_key: str, model: str, base_url: str, timeout: float = 30) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def complete(self, message: str) -> str:
        """Return the model's text reply to ``message``."""
        if not self.api_key:
            logger.error("GEMINI_API_KEY is not configured")
            raise CompletionNotConfigured()

        url = f"{self.base_url}/models/{self.model}:generateContent"
        body = {"contents": [{"role": "user", "parts": [{"text": message}]}]}
        try:
            resp = requests.post(url, json=body, headers={"x-goog-api-key": self.api_key}, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("Gemini request failed: %s", e)
            raise CompletionFailure() from e

        text = extract_text(data)
        if not text:
            logger.error("Gemini response had no text (finish reason: %s)", _finish_reason(data))
            raise CompletionFailure()
        return text


def extract_text(data: dict) -> str:
    """Join the text parts of the first candidate."""
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(p.get("text", "") for p in parts)


def _finish_reason(data: dict) -> str | None:
    candidates = data.get("candidates") or []
    if candidates:
        return candidates[0].get("finishReason")
    return (data.get("promptFeedback") or {}).get("blockReason")
