"""
Virtual Assistant - voice-driven personal assistant backend and client.
"""

import logging

# Quiet down chatty third-party loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("google_genai").setLevel(logging.WARNING)

__version__ = "0.1.0"

from virtual_assistant.core.intents import IntentKind, IntentRecord
from virtual_assistant.core.router import RejectedIntent, RoutedResponse, route

__all__ = [
    "IntentKind",
    "IntentRecord",
    "RejectedIntent",
    "RoutedResponse",
    "route",
    "__version__",
]
