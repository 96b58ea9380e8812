"""
Ollama classifier backend for local models.
"""

import logging
from typing import Optional

from virtual_assistant.classifier.base import ClassifierBackend, ClassifierBackendError
from virtual_assistant.classifier.registry import register_classifier_backend

logger = logging.getLogger(__name__)


@register_classifier_backend("ollama")
class OllamaBackend(ClassifierBackend):
    """
    Classifier backend using a local Ollama server.

    Ollama must be running: `ollama serve`
    """

    default_model = "llama3.2:3b"

    def __init__(self):
        super().__init__()
        self._client = None

    def load(self, model: Optional[str] = None, host: Optional[str] = None, **kwargs) -> None:
        try:
            import ollama
        except ImportError as e:
            raise ImportError(
                "Ollama Python client not installed. "
                "Install with: pip install ollama"
            ) from e

        self._client = ollama.Client(host=host or "http://localhost:11434")
        self._model = model or self.default_model
        self._loaded = True
        logger.info("Ollama classifier ready: %s", self._model)

    def generate(self, prompt: str) -> str:
        if self._client is None:
            raise ClassifierBackendError("Ollama backend not loaded")

        try:
            response = self._client.chat(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                format="json",
                options={"temperature": 0},
            )
        except Exception as e:
            raise ClassifierBackendError(f"Ollama request failed: {e}") from e

        return response["message"]["content"] or ""
