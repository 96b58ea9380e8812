"""
Classifier backends by name.

Backends register themselves with a decorator when their module is
imported. The names here are the values accepted by the
``classifier.backend`` setting and the ``--classifier``/``--backend``
CLI options.
"""

import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from virtual_assistant.classifier.base import ClassifierBackend

logger = logging.getLogger(__name__)

_classifier_backends: dict[str, type["ClassifierBackend"]] = {}
_discovered = False


def register_classifier_backend(name: str):
    """
    Decorator to register a classifier backend under ``name``.

    Example:
        @register_classifier_backend("gemini")
        class GeminiBackend(ClassifierBackend):
            ...
    """

    def decorator(cls: type["ClassifierBackend"]) -> type["ClassifierBackend"]:
        if name in _classifier_backends and _classifier_backends[name] is not cls:
            raise ValueError(f"Classifier backend '{name}' is already registered")
        cls.name = name
        _classifier_backends[name] = cls
        return cls

    return decorator


def classifier_backend_names() -> list[str]:
    """Registered backend names, sorted."""
    _discover_backends()
    return sorted(_classifier_backends)


def check_backend_name(name: str) -> str:
    """
    Return ``name`` if a backend is registered under it.

    Raises:
        ValueError: With the available names, if none is.
    """
    names = classifier_backend_names()
    if name not in names:
        raise ValueError(f"Unknown classifier backend '{name}'. Available: {', '.join(names)}")
    return name


def get_classifier_backend(name: str) -> "ClassifierBackend":
    """Create an unloaded backend instance."""
    return _classifier_backends[check_backend_name(name)]()


def load_classifier_backend(name: str, model: Optional[str] = None, **options) -> "ClassifierBackend":
    """
    Create a backend and load it.

    Args:
        name: Registered backend name
        model: Model to use (default: the backend's own default)
        **options: Backend-specific options such as ``api_key``

    Raises:
        ValueError: Unknown name, or missing credentials
        ImportError: Provider SDK not installed
    """
    backend = get_classifier_backend(name)
    backend.load(model=model, **options)
    logger.info("Classifier backend %s ready (%s)", name, backend.model)
    return backend


def list_classifier_backends() -> list[dict]:
    """Describe each registered backend for display."""
    _discover_backends()
    return [
        {
            "name": name,
            "class": cls.__name__,
            "default_model": cls.default_model,
            "requires_api_key": cls.requires_api_key,
        }
        for name, cls in sorted(_classifier_backends.items())
    ]


def _discover_backends() -> None:
    """Import the built-in backend modules so they register themselves."""
    global _discovered
    if _discovered:
        return

    # Provider SDKs are imported lazily inside load(), so these always import
    from virtual_assistant.classifier import gemini  # noqa: F401
    from virtual_assistant.classifier import ollama_chat  # noqa: F401
    from virtual_assistant.classifier import openai_chat  # noqa: F401
    from virtual_assistant.classifier import simple  # noqa: F401

    _discovered = True
