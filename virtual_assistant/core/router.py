"""
Command routing: turn a classified intent into the reply the client speaks.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from virtual_assistant.core.intents import (
    CLOCK_KINDS,
    PASSTHROUGH_KINDS,
    IntentKind,
    IntentRecord,
)

logger = logging.getLogger(__name__)

UNRECOGNIZED_COMMAND = "unrecognized command type"


@dataclass(frozen=True)
class RoutedResponse:
    """A reply ready for the client."""

    kind: IntentKind
    user_input: str
    response: str

    def to_payload(self) -> dict[str, str]:
        return {
            "type": self.kind.value,
            "userInput": self.user_input,
            "response": self.response,
        }


@dataclass(frozen=True)
class RejectedIntent:
    """A record whose kind the router does not handle."""

    kind: str
    reason: str = UNRECOGNIZED_COMMAND


RouteResult = Union[RoutedResponse, RejectedIntent]


def clock_response(kind: IntentKind, now: datetime) -> str:
    """Format the locally computed answer for a date/time kind."""
    if kind == IntentKind.GET_DATE:
        return f"Today's date is {now:%d-%m-%Y}"
    if kind == IntentKind.GET_TIME:
        return f"Current time is {now:%I:%M %p}"
    if kind == IntentKind.GET_DAY:
        return f"Today is {now:%A}"
    if kind == IntentKind.GET_MONTH:
        return f"Current month is {now:%B}"
    raise ValueError(f"Not a clock kind: {kind.value}")


def route(record: IntentRecord, now: Optional[datetime] = None) -> RouteResult:
    """
    Route a classified record.

    Date/time kinds are answered from the clock and ignore the model's
    response. Action kinds and ``general`` pass through unchanged. Anything
    else is rejected.

    Args:
        record: Classified command
        now: Clock override (defaults to the current local time)

    Returns:
        RoutedResponse or RejectedIntent
    """
    kind = record.intent

    if kind in CLOCK_KINDS:
        now = now or datetime.now()
        return RoutedResponse(
            kind=kind,
            user_input=record.original_input,
            response=clock_response(kind, now),
        )

    if kind in PASSTHROUGH_KINDS:
        return RoutedResponse(
            kind=kind,
            user_input=record.original_input,
            response=record.spoken_response,
        )

    logger.warning("Rejected command type: %r", record.kind)
    return RejectedIntent(kind=record.kind)
