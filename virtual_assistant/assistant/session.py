"""
Voice interaction state machine.

A VoiceSession owns the conversation phase (idle, listening, processing,
speaking), the conversation mode (inactive, armed by name, active) and the
busy flags of the two speech resources. It is driven by the events a
SpeechCapabilities implementation delivers and by an explicit watchdog tick.
"""

import logging
import threading
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

from virtual_assistant.assistant.actions import open_in_browser
from virtual_assistant.assistant.capabilities import SpeechCapabilities
from virtual_assistant.assistant.locks import ResourceLocks
from virtual_assistant.assistant.watchdog import Watchdog
from virtual_assistant.core.intents import destination_for

logger = logging.getLogger(__name__)

STOP_PHRASES = ["stop listening", "goodbye", "bas karo", "ruk jao", "chup ho jao"]
GOODBYE = "Goodbye! Have a great day."
NOT_UNDERSTOOD = "Sorry, I didn't understand that. Please try again."
SYSTEM_PROBLEM = "There was a problem with my system. Please try again later."

# Capture errors that mean "we closed it on purpose"
SILENT_CAPTURE_ERRORS = frozenset({"aborted"})

# Returns {type, userInput, response}, or None when the command was not understood
Dispatcher = Callable[[str], Optional[dict]]


class ConversationPhase(Enum):
    """What the session is doing right now."""

    IDLE = "idle"
    LISTENING = "listening"
    PROCESSING = "processing"  # Waiting on the dispatcher
    SPEAKING = "speaking"


class ConversationMode(Enum):
    """Whether transcripts need the assistant's name to be acted on."""

    INACTIVE = "inactive"  # Not listening unless explicitly armed
    ARMED_BY_NAME = "armed_by_name"  # Listening, acts only on the name
    CONVERSATION_ACTIVE = "conversation_active"  # Acts on every transcript


@dataclass
class SessionConfig:
    """Configuration for a voice session."""

    assistant_name: str = "Assistant"
    user_name: str = ""
    stop_phrases: list[str] = field(default_factory=lambda: list(STOP_PHRASES))
    greeting: Optional[str] = None  # Defaults to "Hello, I am <name>. How can I help you?"
    watchdog_interval_s: float = 10.0  # 0 disables the background watchdog
    open_urls: bool = True

    # Backend (remote dispatch)
    server_host: str = "localhost"
    server_port: int = 8000

    # Local dispatch
    classifier_backend: str = "simple"
    classifier_model: Optional[str] = None
    language: str = "en"

    verbose: bool = False

    # Callbacks
    on_state_change: Optional[Callable[[ConversationPhase, ConversationMode], None]] = None
    on_transcript: Optional[Callable[[str], None]] = None
    on_response: Optional[Callable[[dict], None]] = None
    on_error: Optional[Callable[[Exception], None]] = None

    @classmethod
    def from_yaml(cls, path: str) -> dict:
        """Load config values from a YAML file.

        Returns a dict of config keys -> values (not a SessionConfig instance)
        so the caller can merge CLI overrides before constructing. Unknown
        keys and callback fields are ignored.
        """
        import yaml

        yaml_path = Path(path).expanduser()
        with open(yaml_path) as f:
            raw = yaml.safe_load(f) or {}

        valid_keys = {f.name for f in fields(cls) if not f.name.startswith("on_")}
        return {k: v for k, v in raw.items() if k in valid_keys}

    @property
    def greeting_text(self) -> str:
        if self.greeting:
            return self.greeting
        name = self.assistant_name.strip()
        if not name:
            return "Hello, how can I help you?"
        return f"Hello, I am {name}. How can I help you?"


class VoiceSession:
    """
    Voice interaction session.

    Usage:
        caps = TerminalSpeech()
        session = VoiceSession(caps, RemoteDispatcher(client), SessionConfig(assistant_name="Jarvis"))
        session.start()   # greet, then listen in an active conversation
        ...
        session.close()

    All events are serialized by one re-entrant lock, so capability
    implementations may deliver them from any thread, or synchronously from
    inside the call that caused them.
    """

    def __init__(
        self,
        capabilities: SpeechCapabilities,
        dispatcher: Dispatcher,
        config: Optional[SessionConfig] = None,
        url_opener: Optional[Callable[[str], Any]] = None,
    ):
        self.config = config or SessionConfig()
        self.capabilities = capabilities
        self.dispatcher = dispatcher
        self.url_opener = url_opener or open_in_browser

        self.phase = ConversationPhase.IDLE
        self.mode = ConversationMode.INACTIVE
        self.locks = ResourceLocks()

        # Display state
        self.user_text = ""
        self.ai_text = ""
        self.last_transcript = ""

        self._events = threading.RLock()
        self._utterance_id = 0
        self._capture_id = 0
        self._after_speech: Optional[Callable[[], None]] = None
        self._closed = False
        self._watchdog: Optional[Watchdog] = None

        capabilities.bind(self)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def listening_wanted(self) -> bool:
        return self.mode in (ConversationMode.ARMED_BY_NAME, ConversationMode.CONVERSATION_ACTIVE)

    # === Public operations ===

    def start(self) -> None:
        """Greet the user and enter an active conversation."""
        with self._events:
            if self._closed:
                raise RuntimeError("Session is closed")
            self._set_mode(ConversationMode.CONVERSATION_ACTIVE)
            self._ensure_watchdog()
            greeting = self.config.greeting_text
            self.ai_text = greeting
            self._speak(greeting)

    def arm(self) -> None:
        """Listen in the background and wake only when the assistant's name is heard."""
        with self._events:
            if self._closed:
                raise RuntimeError("Session is closed")
            self._set_mode(ConversationMode.ARMED_BY_NAME)
            self._ensure_watchdog()
            if not self.locks.speech.held:
                self._start_capture()

    def stop(self) -> None:
        """End the conversation and release both resources."""
        with self._events:
            if self._closed:
                return
            self._set_mode(ConversationMode.INACTIVE)
            self._stop_capture()
            self._cancel_speech()
            self._set_phase(ConversationPhase.IDLE)

    def close(self) -> None:
        """Stop, and ignore every event delivered afterwards."""
        with self._events:
            if self._closed:
                return
            self.stop()
            self._closed = True
            watchdog, self._watchdog = self._watchdog, None
        if watchdog is not None:
            watchdog.stop()
        logger.info("Voice session closed")

    def handle_transcript(self, text: str) -> None:
        """Act on one final transcript from the capture session."""
        with self._events:
            if self._closed:
                return
            text = (text or "").strip()
            if not text:
                return
            if self.phase in (ConversationPhase.PROCESSING, ConversationPhase.SPEAKING):
                logger.debug("Ignoring transcript while %s: %r", self.phase.value, text)
                return

            self.last_transcript = text
            self.user_text = text
            self._run_callback("on_transcript", text)

            lowered = text.lower()
            if self._is_stop_phrase(lowered):
                if self.mode == ConversationMode.INACTIVE:
                    logger.debug("Stop phrase while inactive, nothing to do")
                    return
                self._say_goodbye()
                return

            if self.mode != ConversationMode.CONVERSATION_ACTIVE:
                name = self.config.assistant_name.strip().lower()
                if not name or name not in lowered:
                    logger.info("Heard (no assistant name): %s", text)
                    return
                self._set_mode(ConversationMode.CONVERSATION_ACTIVE)

            self._process(text)

    def watchdog_tick(self) -> bool:
        """
        Re-arm capture if listening is wanted and nothing is in progress.

        Returns:
            True if capture was started
        """
        with self._events:
            if self._closed or not self.listening_wanted:
                return False
            if self.phase in (ConversationPhase.PROCESSING, ConversationPhase.SPEAKING):
                return False
            if not self.locks.idle:
                return False
            return self._start_capture()

    # === Capability events ===

    def on_transcript(self, text: str) -> None:
        self.handle_transcript(text)

    def on_capture_started(self, capture_id: int) -> None:
        with self._events:
            if self._closed or not self._is_current_capture(capture_id):
                return
            if self.phase == ConversationPhase.IDLE:
                self._set_phase(ConversationPhase.LISTENING)

    def on_capture_ended(self, capture_id: int) -> None:
        with self._events:
            if self._closed or not self._is_current_capture(capture_id):
                return
            self.locks.capture.release()
            if self.phase == ConversationPhase.LISTENING:
                self._set_phase(ConversationPhase.IDLE)
            if self.phase == ConversationPhase.IDLE and self.listening_wanted:
                self._start_capture()

    def on_capture_error(self, capture_id: int, error: str) -> None:
        with self._events:
            if self._closed or not self._is_current_capture(capture_id):
                return
            self.locks.capture.release()
            if self.phase == ConversationPhase.LISTENING:
                self._set_phase(ConversationPhase.IDLE)
            if error in SILENT_CAPTURE_ERRORS:
                logger.debug("Capture %s", error)
                return
            logger.warning("Capture error: %s", error)
            if self.phase == ConversationPhase.IDLE and self.listening_wanted:
                self._start_capture()

    def on_speech_ended(self, utterance_id: int) -> None:
        with self._events:
            if self._closed:
                return
            self._finish_speech(utterance_id)

    def on_speech_error(self, utterance_id: int, error: str) -> None:
        with self._events:
            if self._closed:
                return
            logger.warning("Speech error: %s", error)
            self._finish_speech(utterance_id)

    # === Internals ===

    def _set_phase(self, phase: ConversationPhase) -> None:
        old = self.phase
        self.phase = phase
        if old != phase:
            logger.debug("Phase %s -> %s", old.value, phase.value)
            self._notify_state()

    def _set_mode(self, mode: ConversationMode) -> None:
        old = self.mode
        self.mode = mode
        if old != mode:
            logger.info("Conversation %s", mode.value)
            self._notify_state()

    def _notify_state(self) -> None:
        self._run_callback("on_state_change", self.phase, self.mode)

    def _run_callback(self, name: str, *args) -> None:
        callback = getattr(self.config, name)
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            # Observers never stall the conversation
            logger.exception("%s callback failed", name)

    def _is_stop_phrase(self, lowered: str) -> bool:
        return any(phrase.lower() in lowered for phrase in self.config.stop_phrases)

    def _ensure_watchdog(self) -> None:
        if self._watchdog is None and self.config.watchdog_interval_s > 0:
            self._watchdog = Watchdog(self.watchdog_tick, self.config.watchdog_interval_s)
            self._watchdog.start()

    def _start_capture(self) -> bool:
        if self._closed or not self.listening_wanted or self.locks.speech.held:
            return False
        if not self.locks.capture.try_acquire():
            return False
        self._capture_id += 1
        self._set_phase(ConversationPhase.LISTENING)
        try:
            self.capabilities.start_capture(self._capture_id)
        except Exception as e:
            # The watchdog retries on its next tick
            logger.warning("Could not start capture: %s", e)
            self.locks.capture.release()
            if self.phase == ConversationPhase.LISTENING:
                self._set_phase(ConversationPhase.IDLE)
            return False
        return True

    def _is_current_capture(self, capture_id: int) -> bool:
        if capture_id != self._capture_id or not self.locks.capture.held:
            logger.debug("Ignoring stale capture event %d", capture_id)
            return False
        return True

    def _stop_capture(self) -> None:
        if not self.locks.capture.held:
            return
        # The end event of the stopped capture is stale from here on
        self._capture_id += 1
        self.locks.capture.release()
        try:
            self.capabilities.stop_capture()
        except Exception as e:
            logger.warning("Could not stop capture: %s", e)

    def _cancel_speech(self) -> None:
        if not self.locks.speech.held:
            return
        # Invalidate the in-flight utterance so its late end event is ignored
        self._utterance_id += 1
        self._after_speech = None
        self.locks.speech.release()
        try:
            self.capabilities.cancel_speech()
        except Exception as e:
            logger.warning("Could not cancel speech: %s", e)

    def _speak(self, text: str, then: Optional[Callable[[], None]] = None) -> None:
        self._stop_capture()
        self._cancel_speech()

        self._utterance_id += 1
        utterance_id = self._utterance_id
        self.locks.speech.try_acquire()
        self._after_speech = then
        self._set_phase(ConversationPhase.SPEAKING)

        try:
            self.capabilities.speak(text, utterance_id)
        except Exception as e:
            logger.error("Could not speak: %s", e)
            self._finish_speech(utterance_id)

    def _finish_speech(self, utterance_id: int) -> None:
        if utterance_id != self._utterance_id or not self.locks.speech.held:
            logger.debug("Ignoring stale speech event %d", utterance_id)
            return

        self.locks.speech.release()
        then, self._after_speech = self._after_speech, None
        self.ai_text = ""
        self._set_phase(ConversationPhase.IDLE)

        # Runs on failed speech too; only a cancel drops it
        if then is not None:
            then()

        if self.listening_wanted and self.phase == ConversationPhase.IDLE:
            self._start_capture()

    def _say_goodbye(self) -> None:
        self._set_mode(ConversationMode.INACTIVE)
        self._stop_capture()
        self.ai_text = GOODBYE
        self._speak(GOODBYE, then=self._clear_display)

    def _clear_display(self) -> None:
        self.user_text = ""
        self.ai_text = ""

    def _say(self, text: str) -> None:
        self.ai_text = text
        self._speak(text)

    def _process(self, text: str) -> None:
        self._set_phase(ConversationPhase.PROCESSING)
        self.ai_text = ""
        self._stop_capture()

        try:
            reply = self.dispatcher(text)
        except Exception as e:
            logger.error("Dispatch failed: %s", e)
            self._run_callback("on_error", e)
            self._say(SYSTEM_PROBLEM)
            return

        if not isinstance(reply, dict) or not reply.get("type") or not reply.get("response"):
            self._say(NOT_UNDERSTOOD)
            return

        self._run_callback("on_response", reply)

        user_input = reply.get("userInput") or text
        url = destination_for(reply["type"], user_input) if self.config.open_urls else None
        self.ai_text = reply["response"]
        self._speak(reply["response"], then=(lambda: self._open(url)) if url else None)

    def _open(self, url: str) -> None:
        logger.info("Opening %s", url)
        try:
            opened = self.url_opener(url)
        except Exception as e:
            logger.warning("Could not open %s: %s", url, e)
            return
        if opened is False:
            logger.warning("Browser refused to open %s", url)
