"""
HTTP client for the Gemini generateContent API.
Sends a single text prompt and returns the concatenated text reply.
"""
import logging
import time
from typing import Optional

import requests

from ..models.settings import OptimizerSettings

logger = logging.getLogger(__name__)


class GeminiClientError(Exception):
    """Custom exception for generative service errors."""
    pass


class GeminiClient:
    """
    Minimal client for the Gemini REST API.

    The request optionally enables the Google Maps grounding tool so the
    model can geocode addresses; with that tool a JSON response MIME type
    cannot be requested, so replies may be prose-wrapped.
    """

    def __init__(self, settings: OptimizerSettings, session: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            settings: Optimizer settings (model, endpoint, timeout, API key)
            session: Optional requests session (for connection reuse)
        """
        self.settings = settings
        self.session = session or requests.Session()

        # Call statistics
        self.api_calls = 0
        self.failures = 0

    @property
    def url(self) -> str:
        """generateContent URL for the configured model."""
        return f"{self.settings.endpoint}/models/{self.settings.model}:generateContent"

    def build_payload(self, prompt: str) -> dict:
        """Request body for a single-turn text prompt."""
        payload = {
            "contents": [
                {"role": "user", "parts": [{"text": prompt}]}
            ],
        }
        if self.settings.use_maps_grounding:
            payload["tools"] = [{"googleMaps": {}}]
        return payload

    def generate(self, prompt: str) -> str:
        """
        Send a prompt and return the model's text reply.

        Args:
            prompt: Natural-language instruction

        Returns:
            Text of the first candidate (all text parts joined)

        Raises:
            GeminiClientError: If no credential is set, the request fails or
                the response carries no text
        """
        if not self.settings.is_configured:
            raise GeminiClientError("GEMINI_API_KEY is not configured")

        self.api_calls += 1
        start_time = time.time()

        try:
            response = self.session.post(
                self.url,
                json=self.build_payload(prompt),
                headers={"x-goog-api-key": self.settings.api_key},
                timeout=self.settings.timeout_seconds,
            )
        except requests.exceptions.Timeout as e:
            self.failures += 1
            raise GeminiClientError(
                f"Optimization service timed out after {self.settings.timeout_seconds}s: {e}"
            )
        except requests.exceptions.RequestException as e:
            self.failures += 1
            raise GeminiClientError(f"Optimization service request failed: {e}")

        elapsed = time.time() - start_time
        logger.info(f"Optimization service responded with HTTP {response.status_code} in {elapsed:.2f}s")

        if response.status_code != 200:
            self.failures += 1
            raise GeminiClientError(
                f"Optimization service HTTP error {response.status_code}: {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            self.failures += 1
            raise GeminiClientError(f"Optimization service returned invalid JSON: {e}")

        return self._extract_text(data)

    def _extract_text(self, data: dict) -> str:
        """
        Pull the reply text out of a generateContent response.

        Raises:
            GeminiClientError: If the response has no text candidate
        """
        candidates = data.get("candidates") or []
        if not candidates:
            feedback = data.get("promptFeedback", {})
            self.failures += 1
            raise GeminiClientError(f"Optimization service returned no candidates: {feedback}")

        parts = candidates[0].get("content", {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        if not text.strip():
            self.failures += 1
            raise GeminiClientError("Optimization service returned an empty reply")

        return text
