"""Text-mode speech capabilities: typed lines stand in for the microphone."""

import logging
from typing import Optional

from rich.console import Console

from virtual_assistant.assistant.capabilities import SpeechCapabilities

logger = logging.getLogger(__name__)


class TerminalSpeech(SpeechCapabilities):
    """
    Speech capabilities for a terminal.

    ``speak`` prints the reply and completes immediately. Capture is
    "open" between start_capture and stop_capture; lines submitted while it
    is closed are dropped.
    """

    def __init__(self, console: Optional[Console] = None, assistant_label: str = "Assistant"):
        super().__init__()
        self.console = console or Console()
        self.assistant_label = assistant_label
        self.capturing = False
        self.capture_id = 0

    def start_capture(self, capture_id: int) -> None:
        self.capturing = True
        self.capture_id = capture_id
        if self.listener:
            self.listener.on_capture_started(capture_id)

    def stop_capture(self) -> None:
        if not self.capturing:
            return
        self.capturing = False
        if self.listener:
            self.listener.on_capture_ended(self.capture_id)

    def speak(self, text: str, utterance_id: int) -> None:
        self.console.print(f"[bold cyan]{self.assistant_label}:[/bold cyan] {text}")
        if self.listener:
            self.listener.on_speech_ended(utterance_id)

    def cancel_speech(self) -> None:
        pass

    def submit(self, line: str) -> bool:
        """
        Deliver a typed line as a transcript.

        Returns:
            False if capture was closed and the line was dropped
        """
        if not self.capturing:
            logger.debug("Not listening, dropped %r", line)
            return False
        if self.listener:
            self.listener.on_transcript(line)
        return True

    def end_of_input(self) -> None:
        """Stdin closed: report capture as ended for good."""
        self.capturing = False
        if self.listener:
            self.listener.on_capture_error(self.capture_id, "aborted")
