"""
Voice interaction session: name gating, stop phrases, busy flags, watchdog.
"""

from virtual_assistant.assistant.capabilities import CapabilityListener, SpeechCapabilities
from virtual_assistant.assistant.dispatch import LocalDispatcher, RemoteDispatcher
from virtual_assistant.assistant.locks import BusyFlag, ResourceLocks
from virtual_assistant.assistant.session import (
    ConversationMode,
    ConversationPhase,
    SessionConfig,
    VoiceSession,
)
from virtual_assistant.assistant.terminal import TerminalSpeech
from virtual_assistant.assistant.watchdog import Watchdog

__all__ = [
    "CapabilityListener",
    "SpeechCapabilities",
    "LocalDispatcher",
    "RemoteDispatcher",
    "BusyFlag",
    "ResourceLocks",
    "ConversationMode",
    "ConversationPhase",
    "SessionConfig",
    "VoiceSession",
    "TerminalSpeech",
    "Watchdog",
]
