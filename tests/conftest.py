"""
Shared fixtures: fake speech capabilities, fake classifier backends, app setup.
"""

import json
from datetime import datetime
from typing import Optional

import pytest

from virtual_assistant.assistant.capabilities import SpeechCapabilities
from virtual_assistant.classifier import ClassifierBackend, IntentClassifier
from virtual_assistant.config import (
    AuthConfig,
    ClassifierConfig,
    Config,
    MediaConfig,
    StorageConfig,
)

JWT_SECRET = "test-secret-with-enough-length-for-hs256"


class FakeSpeech(SpeechCapabilities):
    """
    Speech capabilities driven by the test.

    Capture start/stop report their events synchronously, like a browser
    recognizer that ends right after stop(). Speech only ends when the test
    calls finish_speech().
    """

    def __init__(self, fail_start: bool = False):
        super().__init__()
        self.capturing = False
        self.capture_starts = 0
        self.capture_id = 0
        self.capture_stops = 0
        self.spoken: list[tuple[str, int]] = []
        self.cancelled = 0
        self.fail_start = fail_start

    def start_capture(self, capture_id: int) -> None:
        if self.fail_start:
            raise RuntimeError("recognizer already started")
        self.capture_starts += 1
        self.capturing = True
        self.capture_id = capture_id
        self.listener.on_capture_started(capture_id)

    def stop_capture(self) -> None:
        self.capture_stops += 1
        self.capturing = False
        self.listener.on_capture_ended(self.capture_id)

    def speak(self, text: str, utterance_id: int) -> None:
        self.spoken.append((text, utterance_id))

    def cancel_speech(self) -> None:
        self.cancelled += 1

    # Test helpers

    @property
    def last_spoken(self) -> Optional[str]:
        return self.spoken[-1][0] if self.spoken else None

    def finish_speech(self) -> None:
        self.listener.on_speech_ended(self.spoken[-1][1])

    def hear(self, text: str) -> None:
        self.listener.on_transcript(text)

    def end_capture(self) -> None:
        """Capture closes on its own, e.g. after a silence timeout."""
        self.capturing = False
        self.listener.on_capture_ended(self.capture_id)

    def capture_error(self, error: str) -> None:
        self.capturing = False
        self.listener.on_capture_error(self.capture_id, error)

    def die(self) -> None:
        """Capture stops on its own without an end event."""
        self.capturing = False


class ScriptedBackend(ClassifierBackend):
    """Classifier backend that returns canned replies and records prompts."""

    name = "scripted"

    def __init__(self, reply=None, error: Optional[Exception] = None):
        super().__init__()
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    def load(self, model: Optional[str] = None, **kwargs) -> None:
        self._model = model or "scripted"
        self._loaded = True

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if isinstance(self.reply, dict):
            return json.dumps(self.reply)
        return self.reply


def scripted_classifier(reply=None, error=None, language="en") -> IntentClassifier:
    backend = ScriptedBackend(reply=reply, error=error)
    backend.load()
    return IntentClassifier(backend, language=language)


@pytest.fixture
def fake_speech():
    return FakeSpeech()


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2024, 3, 15, 14, 5)


@pytest.fixture
def app_config(tmp_path):
    """In-memory config with a JWT secret and the simple classifier."""
    return Config(
        classifier=ClassifierConfig(backend="simple", language="en"),
        auth=AuthConfig(jwt_secret=JWT_SECRET),
        storage=StorageConfig(accounts_path=None, upload_dir=tmp_path / "uploads"),
        media=MediaConfig(cloud_name=None, api_key=None, api_secret=None),
    )


