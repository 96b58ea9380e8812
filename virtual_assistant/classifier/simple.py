"""
Rule-based classifier backend for development and tests without a model.
"""

import json
import logging
from typing import Optional

from virtual_assistant.classifier.base import ClassifierBackend
from virtual_assistant.classifier.prompts import extract_command
from virtual_assistant.classifier.registry import register_classifier_backend

logger = logging.getLogger(__name__)


@register_classifier_backend("simple")
class SimpleBackend(ClassifierBackend):
    """
    Keyword rules that reply in the same JSON shape as a real model.

    First matching rule wins, so more specific phrases come first.
    """

    default_model = "simple"

    # (keywords, type, response)
    RULES: list[tuple[tuple[str, ...], str, str]] = [
        (("youtube",), "youtube-search", "Searching YouTube."),
        (("play",), "youtube-play", "Playing it on YouTube."),
        (("calculator",), "calculator-open", "Opening calculator."),
        (("instagram",), "instagram-open", "Opening Instagram."),
        (("facebook",), "facebook-open", "Opening Facebook."),
        (("linkedin",), "linkedin-open", "Opening LinkedIn."),
        (("github",), "github-open", "Opening GitHub."),
        (("whatsapp",), "whatsapp-open", "Opening WhatsApp."),
        (("maps", "map"), "maps-open", "Opening Google Maps."),
        (("weather",), "weather-show", "Showing the weather."),
        (("time",), "get-time", "Checking the time."),
        (("date",), "get-date", "Checking the date."),
        (("month",), "get-month", "Checking the month."),
        (("day",), "get-day", "Checking the day."),
        (("search", "google"), "google-search", "Searching Google."),
    ]

    def load(self, model: Optional[str] = None, **kwargs) -> None:
        self._model = self.default_model
        self._loaded = True
        logger.info("Using simple rule-based classifier (no model)")

    def classify_text(self, command: str) -> dict[str, str]:
        """Apply the keyword rules to a command."""
        words = command.lower().replace(",", " ").replace("?", " ").split()
        for keywords, kind, response in self.RULES:
            if any(keyword in words for keyword in keywords):
                return {"type": kind, "userInput": command, "response": response}

        return {
            "type": "general",
            "userInput": command,
            "response": "I'm not sure about that yet, but I'm always learning.",
        }

    def generate(self, prompt: str) -> str:
        command = extract_command(prompt)
        if command is None:
            return ""
        return json.dumps(self.classify_text(command))
