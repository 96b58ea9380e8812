"""
Intent records exchanged between the classifier, the router and the client.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional
from urllib.parse import quote


class IntentKind(str, Enum):
    """Command types the classifier is allowed to emit."""

    GET_DATE = "get-date"
    GET_TIME = "get-time"
    GET_DAY = "get-day"
    GET_MONTH = "get-month"
    GOOGLE_SEARCH = "google-search"
    YOUTUBE_SEARCH = "youtube-search"
    YOUTUBE_PLAY = "youtube-play"
    CALCULATOR_OPEN = "calculator-open"
    INSTAGRAM_OPEN = "instagram-open"
    FACEBOOK_OPEN = "facebook-open"
    WEATHER_SHOW = "weather-show"
    LINKEDIN_OPEN = "linkedin-open"
    GITHUB_OPEN = "github-open"
    WHATSAPP_OPEN = "whatsapp-open"
    MAPS_OPEN = "maps-open"
    GENERAL = "general"

    @classmethod
    def parse(cls, value: str) -> Optional["IntentKind"]:
        """Return the matching kind, or None for anything unrecognized."""
        try:
            return cls(value)
        except ValueError:
            return None


# Answered from the local clock, never from the model
CLOCK_KINDS = frozenset({
    IntentKind.GET_DATE,
    IntentKind.GET_TIME,
    IntentKind.GET_DAY,
    IntentKind.GET_MONTH,
})

# Passed through with the classifier's own response
PASSTHROUGH_KINDS = frozenset(IntentKind) - CLOCK_KINDS

_GOOGLE_SEARCH = "https://www.google.com/search?q="
_YOUTUBE_SEARCH = "https://www.youtube.com/results?search_query="

# kind -> (url prefix, append escaped user input)
_DESTINATIONS: dict[IntentKind, tuple[str, bool]] = {
    IntentKind.GOOGLE_SEARCH: (_GOOGLE_SEARCH, True),
    IntentKind.CALCULATOR_OPEN: (_GOOGLE_SEARCH + "calculator", False),
    IntentKind.INSTAGRAM_OPEN: ("https://www.instagram.com/", False),
    IntentKind.FACEBOOK_OPEN: ("https://www.facebook.com/", False),
    IntentKind.WEATHER_SHOW: (_GOOGLE_SEARCH + "weather", False),
    IntentKind.YOUTUBE_SEARCH: (_YOUTUBE_SEARCH, True),
    IntentKind.YOUTUBE_PLAY: (_YOUTUBE_SEARCH, True),
    IntentKind.MAPS_OPEN: ("https://www.google.com/maps", False),
    IntentKind.LINKEDIN_OPEN: ("https://www.linkedin.com", False),
    IntentKind.GITHUB_OPEN: ("https://www.github.com", False),
    IntentKind.WHATSAPP_OPEN: ("https://web.whatsapp.com", False),
}


def escape_query(text: str) -> str:
    """Escape user input for a URL query value (encodeURIComponent rules)."""
    return quote(text, safe="-_.!~*'()")


def destination_for(kind: str, user_input: str) -> Optional[str]:
    """
    Get the URL opened after the spoken reply for a command.

    Args:
        kind: Command type (wire value)
        user_input: Original user utterance, used as the search query

    Returns:
        URL to open, or None for kinds that only speak
    """
    parsed = IntentKind.parse(kind)
    if parsed is None or parsed not in _DESTINATIONS:
        return None

    prefix, with_query = _DESTINATIONS[parsed]
    if with_query:
        return prefix + escape_query(user_input)
    return prefix


@dataclass(frozen=True)
class IntentRecord:
    """A classified command."""

    kind: str
    original_input: str
    spoken_response: str

    @property
    def intent(self) -> Optional[IntentKind]:
        return IntentKind.parse(self.kind)

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["IntentRecord"]:
        """
        Build a record from a decoded classifier reply.

        Returns None when the payload is not an object or when any of
        ``type``, ``userInput`` or ``response`` is missing or blank.
        """
        if not isinstance(payload, dict):
            return None

        values = []
        for key in ("type", "userInput", "response"):
            value = payload.get(key)
            if not isinstance(value, str) or not value.strip():
                return None
            values.append(value.strip())

        kind, user_input, response = values
        return cls(kind=kind, original_input=user_input, spoken_response=response)

    def to_payload(self) -> dict[str, str]:
        """Wire representation: ``{type, userInput, response}``."""
        return {
            "type": self.kind,
            "userInput": self.original_input,
            "response": self.spoken_response,
        }
