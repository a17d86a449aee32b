"""Thin client for the Gemini generateContent REST API."""

import time

import requests

from .config import settings
from .errors import ConfigurationError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="gemini_client")

RETRYABLE_STATUSES = {429, 500, 503}


class GeminiClient:
    """Minimal client for single-turn text generation."""

    def __init__(self, api_key: str | None = None, model: str | None = None):
        """Initialize client configuration from settings."""
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model = model or settings.gemini_model
        self.url = f"{settings.gemini_base_url}/models/{self.model}:generateContent"
        self.max_retries = settings.gemini_retries
        self.retry_backoff_sec = settings.gemini_retry_backoff_sec

    def ensure_configured(self) -> None:
        """Raise ConfigurationError when no API key is set."""
        if not self.api_key:
            raise ConfigurationError("Gemini API key not configured")

    def generate(self, prompt: str) -> str:
        """Send a prompt and return the generated text."""
        self.ensure_configured()

        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}

        for attempt in range(self.max_retries + 1):
            try:
                logger.debug("Gemini POST prompt chars=%d model=%s", len(prompt), self.model)
                r = requests.post(self.url, json=payload, headers=headers, timeout=60)
                logger.info(
                    "Gemini POST took %.2fs, status %d",
                    r.elapsed.total_seconds(),
                    r.status_code,
                )
            except requests.exceptions.RequestException as exc:
                logger.warning("Gemini POST failed on attempt %d: %s", attempt + 1, exc)
                if attempt < self.max_retries:
                    time.sleep(self.retry_backoff_sec)
                    continue
                raise RuntimeError(f"Gemini POST failed after retries: {exc}") from exc

            if r.status_code == 200:
                break

            error_text = (r.text or "")[:200]
            if r.status_code in RETRYABLE_STATUSES and attempt < self.max_retries:
                logger.warning("Gemini returned %d; retrying (attempt %d/%d).",
                               r.status_code, attempt + 1, self.max_retries + 1)
                time.sleep(self.retry_backoff_sec)
                continue
            raise RuntimeError(
                f"Gemini POST failed with status {r.status_code}: {error_text} (model={self.model})"
            )

        try:
            data = r.json()
        except ValueError as exc:
            raise RuntimeError(f"Gemini returned non-JSON response: {r.text[:200]}") from exc

        candidates = data.get("candidates") or []
        if not candidates:
            reason = (data.get("promptFeedback") or {}).get("blockReason", "no candidates")
            raise RuntimeError(f"Gemini returned no text ({reason})")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(str(part.get("text", "")) for part in parts).strip()


gemini_client = GeminiClient()
