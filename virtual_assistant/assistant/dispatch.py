"""
Command dispatchers for a voice session.

A dispatcher turns a transcript into ``{type, userInput, response}``, or
None when the command was not understood. Exceptions mean the backend could
not be reached.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from virtual_assistant.classifier import IntentClassifier
from virtual_assistant.client import AssistantClient
from virtual_assistant.core.router import RejectedIntent, route

logger = logging.getLogger(__name__)


class RemoteDispatcher:
    """Send commands to a running backend as the signed-in user."""

    def __init__(self, client: AssistantClient):
        self.client = client

    def __call__(self, command: str) -> Optional[dict]:
        return self.client.ask(command)


class LocalDispatcher:
    """
    Classify and route commands in-process, without a backend.

    Usage:
        classifier = IntentClassifier.from_backend("simple", language="en")
        dispatch = LocalDispatcher(classifier, assistant_name="Jarvis", user_name="Asha")
        dispatch("open youtube")
    """

    def __init__(
        self,
        classifier: IntentClassifier,
        assistant_name: str = "Assistant",
        user_name: str = "",
        history: Optional[list[str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.classifier = classifier
        self.assistant_name = assistant_name
        self.user_name = user_name
        self.history = history if history is not None else []
        self.clock = clock or datetime.now

    def __call__(self, command: str) -> Optional[dict]:
        self.history.append(command)

        record = self.classifier.classify(command, self.assistant_name, self.user_name)
        result = route(record, now=self.clock())
        if isinstance(result, RejectedIntent):
            logger.warning("Rejected command type %r", result.kind)
            return None
        return result.to_payload()
