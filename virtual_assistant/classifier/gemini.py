"""
Gemini classifier backend (Google GenAI SDK).
"""

import logging
import os
import time
from typing import Optional

from virtual_assistant.classifier.base import ClassifierBackend, ClassifierBackendError
from virtual_assistant.classifier.registry import register_classifier_backend

logger = logging.getLogger(__name__)


@register_classifier_backend("gemini")
class GeminiBackend(ClassifierBackend):
    """
    Classifier backend using Google's Gemini models.

    Requires GEMINI_API_KEY (or an explicit api_key).
    """

    default_model = "gemini-2.0-flash"
    requires_api_key = True

    def __init__(self):
        super().__init__()
        self._client = None

    def load(self, model: Optional[str] = None, api_key: Optional[str] = None, **kwargs) -> None:
        """Create the GenAI client."""
        try:
            from google import genai
        except ImportError as e:
            raise ImportError(
                "Google GenAI client not installed. "
                "Install with: pip install google-genai"
            ) from e

        api_key = api_key or os.environ.get("GEMINI_API_KEY")
        if not api_key:
            raise ValueError("Gemini API key required. Set GEMINI_API_KEY environment variable.")

        self._client = genai.Client(api_key=api_key)
        self._model = model or self.default_model
        self._loaded = True
        logger.info("Gemini classifier ready: %s", self._model)

    def generate(self, prompt: str) -> str:
        if self._client is None:
            raise ClassifierBackendError("Gemini backend not loaded")

        start = time.perf_counter()
        try:
            response = self._client.models.generate_content(
                model=self._model,
                contents=prompt,
            )
        except Exception as e:
            raise ClassifierBackendError(f"Gemini request failed: {e}") from e

        logger.debug("Gemini reply in %.0fms", (time.perf_counter() - start) * 1000)
        return response.text or ""
