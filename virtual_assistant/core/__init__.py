"""
Core intent model and command routing.
"""

from virtual_assistant.core.intents import (
    CLOCK_KINDS,
    PASSTHROUGH_KINDS,
    IntentKind,
    IntentRecord,
    destination_for,
)
from virtual_assistant.core.router import RejectedIntent, RoutedResponse, route

__all__ = [
    "CLOCK_KINDS",
    "PASSTHROUGH_KINDS",
    "IntentKind",
    "IntentRecord",
    "destination_for",
    "RejectedIntent",
    "RoutedResponse",
    "route",
]
