"""
Intent classification through a generative language model.
"""

from virtual_assistant.classifier.base import ClassifierBackend, ClassifierBackendError
from virtual_assistant.classifier.classifier import IntentClassifier, parse_reply, strip_code_fences
from virtual_assistant.classifier.registry import (
    check_backend_name,
    classifier_backend_names,
    get_classifier_backend,
    list_classifier_backends,
    load_classifier_backend,
    register_classifier_backend,
)

__all__ = [
    "ClassifierBackend",
    "ClassifierBackendError",
    "IntentClassifier",
    "parse_reply",
    "strip_code_fences",
    "register_classifier_backend",
    "check_backend_name",
    "classifier_backend_names",
    "get_classifier_backend",
    "list_classifier_backends",
    "load_classifier_backend",
]
