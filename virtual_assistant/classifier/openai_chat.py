"""
OpenAI chat-completions classifier backend.
"""

import logging
import os
from typing import Optional

from virtual_assistant.classifier.base import ClassifierBackend, ClassifierBackendError
from virtual_assistant.classifier.registry import register_classifier_backend

logger = logging.getLogger(__name__)


@register_classifier_backend("openai")
class OpenAIBackend(ClassifierBackend):
    """
    Classifier backend using the OpenAI API (or any compatible server).

    Requires OPENAI_API_KEY environment variable.
    """

    default_model = "gpt-4o-mini"
    requires_api_key = True

    def __init__(self):
        super().__init__()
        self._client = None

    def load(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        host: Optional[str] = None,
        **kwargs,
    ) -> None:
        try:
            from openai import OpenAI
        except ImportError as e:
            raise ImportError(
                "OpenAI client not installed. "
                "Install with: pip install openai"
            ) from e

        api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OpenAI API key required. Set OPENAI_API_KEY environment variable.")

        self._client = OpenAI(api_key=api_key, base_url=host) if host else OpenAI(api_key=api_key)
        self._model = model or self.default_model
        self._loaded = True
        logger.info("OpenAI classifier ready: %s", self._model)

    def generate(self, prompt: str) -> str:
        if self._client is None:
            raise ClassifierBackendError("OpenAI backend not loaded")

        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0,
            )
        except Exception as e:
            raise ClassifierBackendError(f"OpenAI request failed: {e}") from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
