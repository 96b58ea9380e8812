"""
Speech capture and synthesis capabilities.

The voice session never touches audio hardware directly. It drives a
SpeechCapabilities implementation and receives its completion events
through the CapabilityListener methods.
"""

from abc import ABC, abstractmethod
from typing import Optional, Protocol


class CapabilityListener(Protocol):
    """Events a capability implementation delivers back to the session."""

    def on_capture_started(self, capture_id: int) -> None: ...

    def on_capture_ended(self, capture_id: int) -> None: ...

    def on_capture_error(self, capture_id: int, error: str) -> None: ...

    def on_transcript(self, text: str) -> None: ...

    def on_speech_ended(self, utterance_id: int) -> None: ...

    def on_speech_error(self, utterance_id: int, error: str) -> None: ...


class SpeechCapabilities(ABC):
    """Abstract base class for speech capture + synthesis providers."""

    def __init__(self):
        self._listener: Optional[CapabilityListener] = None

    def bind(self, listener: CapabilityListener) -> None:
        """Attach the session that receives events."""
        self._listener = listener

    @property
    def listener(self) -> Optional[CapabilityListener]:
        return self._listener

    @abstractmethod
    def start_capture(self, capture_id: int) -> None:
        """
        Open a capture session.

        Implementations report ``on_capture_started(capture_id)`` once capture
        is live, ``on_transcript`` per completed utterance, and
        ``on_capture_ended(capture_id)`` or
        ``on_capture_error(capture_id, error)`` when it closes. Events for a
        capture the session has since replaced are ignored.
        """
        pass

    @abstractmethod
    def stop_capture(self) -> None:
        """Close the open capture session, if any."""
        pass

    @abstractmethod
    def speak(self, text: str, utterance_id: int) -> None:
        """
        Start speaking text.

        Implementations report ``on_speech_ended(utterance_id)`` or
        ``on_speech_error(utterance_id, error)`` when done.
        """
        pass

    @abstractmethod
    def cancel_speech(self) -> None:
        """Cancel any in-flight speech."""
        pass
