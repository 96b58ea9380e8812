"""
Abstract base class for text generation backends used by the classifier.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class ClassifierBackendError(RuntimeError):
    """Transport or provider failure while generating a reply."""


class ClassifierBackend(ABC):
    """Abstract base class for classifier backends."""

    name: str = "base"
    default_model: str = ""
    requires_api_key: bool = False

    def __init__(self):
        """Initialize the backend."""
        self._loaded = False
        self._model: Optional[str] = None

    @abstractmethod
    def load(self, model: Optional[str] = None, **kwargs) -> None:
        """
        Create the provider client.

        Args:
            model: Model name (backend default if None)
            **kwargs: Backend-specific options (api_key, host, ...)
        """
        pass

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """
        Send a single prompt and return the raw reply text.

        Args:
            prompt: Complete instruction text

        Returns:
            Reply text exactly as the provider returned it

        Raises:
            ClassifierBackendError: On any transport or provider failure
        """
        pass

    def is_loaded(self) -> bool:
        """Check if the client is ready."""
        return self._loaded

    @property
    def model(self) -> Optional[str]:
        return self._model

    def get_info(self) -> dict[str, Any]:
        """Get backend information."""
        return {
            "name": self.name,
            "loaded": self._loaded,
            "model": self._model,
        }
