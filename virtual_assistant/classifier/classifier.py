"""
Intent classifier boundary.

Wraps a generative backend: builds the prompt, strips formatting artifacts
from the reply, validates it into an IntentRecord, and absorbs every failure
into a fallback ``general`` record so callers never see an exception.
"""

import json
import logging
import re
from typing import Any, Optional

from virtual_assistant.classifier.base import ClassifierBackend, ClassifierBackendError
from virtual_assistant.classifier.prompts import build_prompt
from virtual_assistant.classifier.registry import load_classifier_backend
from virtual_assistant.core.intents import IntentKind, IntentRecord

logger = logging.getLogger(__name__)

# Fallback replies in the assistant's operating language
UNDERSTANDING_FAILURE = {
    "hi": "मुझे आपके अनुरोध को समझने में समस्या हुई। कृपया पुनः प्रयास करें।",
    "en": "I had trouble understanding your request. Please try again.",
}
SYSTEM_FAILURE = {
    "hi": "मेरे सिस्टम में कुछ समस्या आ गई है। कृपया थोड़ी देर बाद फिर से कोशिश करें।",
    "en": "Something went wrong in my system. Please try again in a little while.",
}

_FENCE_RE = re.compile(r"```(?:json|JSON)?")


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers around a JSON reply."""
    return _FENCE_RE.sub("", text).strip()


def parse_reply(text: str) -> Optional[IntentRecord]:
    """
    Parse a raw model reply into a record.

    Returns None if the reply is not a JSON object with non-empty
    ``type``, ``userInput`` and ``response`` strings.
    """
    cleaned = strip_code_fences(text)
    if not cleaned:
        return None

    try:
        payload: Any = json.loads(cleaned)
    except json.JSONDecodeError:
        # Tolerate chatter around the object: take the outermost braces
        start, end = cleaned.find("{"), cleaned.rfind("}")
        if start == -1 or end <= start:
            return None
        try:
            payload = json.loads(cleaned[start:end + 1])
        except json.JSONDecodeError:
            return None

    return IntentRecord.from_payload(payload)


class IntentClassifier:
    """
    Classify free-text commands into intent records.

    Usage:
        classifier = IntentClassifier.from_backend("gemini", api_key="...")
        record = classifier.classify("open calculator", "Jarvis", "Asha")
    """

    def __init__(self, backend: ClassifierBackend, language: str = "hi"):
        """
        Initialize the classifier.

        Args:
            backend: Loaded generation backend
            language: Operating language for fallback messages ("hi" or "en")
        """
        if language not in SYSTEM_FAILURE:
            raise ValueError(f"Unsupported language: {language}")
        self.backend = backend
        self.language = language

    @classmethod
    def from_backend(
        cls,
        name: str,
        model: Optional[str] = None,
        language: str = "hi",
        **kwargs,
    ) -> "IntentClassifier":
        """Create and load a backend by registry name."""
        backend = load_classifier_backend(name, model=model, **kwargs)
        return cls(backend, language=language)

    def fallback(self, transcript: str, system_error: bool = False) -> IntentRecord:
        """Build the ``general`` record returned on any failure."""
        messages = SYSTEM_FAILURE if system_error else UNDERSTANDING_FAILURE
        return IntentRecord(
            kind=IntentKind.GENERAL.value,
            original_input=transcript,
            spoken_response=messages[self.language],
        )

    def classify(self, transcript: str, assistant_name: str, user_name: str) -> IntentRecord:
        """
        Classify a command. Makes a single backend call, never retries.

        Args:
            transcript: Trimmed, non-empty user command
            assistant_name: Assistant's display name
            user_name: Account owner's display name

        Returns:
            Parsed record, or the fallback record on any failure

        Raises:
            ValueError: If transcript is empty
        """
        if not transcript or not transcript.strip():
            raise ValueError("transcript must be non-empty")

        prompt = build_prompt(transcript, assistant_name, user_name)

        try:
            reply = self.backend.generate(prompt)
        except ClassifierBackendError as e:
            logger.error("Classifier backend error: %s", e)
            return self.fallback(transcript, system_error=True)
        except Exception:
            # Provider SDK bugs or unexpected reply shapes
            logger.exception("Classifier backend %s failed", self.backend.name)
            return self.fallback(transcript, system_error=True)

        if not reply or not reply.strip():
            logger.error("Classifier returned an empty reply")
            return self.fallback(transcript, system_error=True)

        logger.debug("Raw classifier reply: %s", reply)

        record = parse_reply(reply)
        if record is None:
            logger.error("Could not parse classifier reply: %r", reply[:200])
            return self.fallback(transcript)

        logger.info("Classified %r as %s", transcript, record.kind)
        return record
