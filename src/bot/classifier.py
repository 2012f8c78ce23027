"""Intent classification for inbound Messenger text.

Two sources feed the classifier:
- platform NLP annotations (``message.nlp.entities``), when enabled
- keyword rules over the lower-cased message text

The rules run in a fixed priority: greeting, goodbye, thanks, show cart.
"""

from __future__ import annotations

import logging
from typing import Any

from src.bot import replies
from src.models import Intent

logger = logging.getLogger(__name__)

# Matched as substrings unless followed by the persona address ("hey milton,")
_GREETING_WORDS = ("hey", "hello", "ola", "olá", "ciao")
_BYE_EXACT = frozenset({"bye", "bye bye", "good bye"})
_THANK_WORDS = ("thank", "gracia")

_CANNED_REPLIES: dict[Intent, str] = {
    Intent.GREETING: replies.WELCOME,
    Intent.INVALID_ATTACHMENT: replies.INVALID_ATTACHMENT,
}


class IntentClassifier:
    """Maps message text and NLP annotations to an Intent."""

    def __init__(self, persona_name: str = "milton", confidence_threshold: float = 0.0) -> None:
        self._persona = persona_name.lower()
        self._threshold = confidence_threshold

    # --- NLP annotations ---

    @staticmethod
    def _first_entity(nlp: dict[str, Any] | None, name: str) -> dict[str, Any] | None:
        if not isinstance(nlp, dict):
            return None
        entities = nlp.get("entities")
        if not isinstance(entities, dict):
            return None
        values = entities.get(name)
        if not isinstance(values, list) or not values:
            return None
        first = values[0]
        return first if isinstance(first, dict) else None

    def nlp_entity(self, nlp: dict[str, Any] | None, name: str) -> str | None:
        """Value of the first entity with the given name, e.g. greetings -> "true"."""
        entity = self._first_entity(nlp, name)
        if entity is None or "value" not in entity:
            return None
        return str(entity["value"])

    def nlp_intent(self, nlp: dict[str, Any] | None) -> Intent | None:
        """First NLP intent above the confidence threshold, if it is a known one."""
        entity = self._first_entity(nlp, "intent")
        if entity is None:
            return None
        confidence = entity.get("confidence", 1.0)
        if isinstance(confidence, (int, float)) and confidence < self._threshold:
            logger.debug("NLP intent %s below threshold (%s)", entity.get("value"), confidence)
            return None
        try:
            return Intent(entity.get("value"))
        except ValueError:
            logger.debug("Unknown NLP intent: %s", entity.get("value"))
            return None

    # --- Keyword rules ---

    def is_greeting(self, text: str) -> bool:
        if text == "hi":
            return True
        if "hi " in text and f"hi {self._persona}," not in text:
            return True
        for word in _GREETING_WORDS:
            if word in text and f"{word} {self._persona}," not in text:
                return True
        return "greeting" in text

    @staticmethod
    def is_bye(text: str) -> bool:
        return text in _BYE_EXACT or "bye" in text

    @staticmethod
    def is_thank(text: str) -> bool:
        return any(word in text for word in _THANK_WORDS)

    # --- Classification ---

    def classify(
        self,
        text: str,
        nlp: dict[str, Any] | None = None,
        enable_nlp: bool = True,
    ) -> Intent | None:
        """Classify lower-cased text, consulting NLP annotations when enabled."""
        intent = self.nlp_intent(nlp) if enable_nlp else None

        if self.nlp_entity(nlp, "greetings") == "true" or self.is_greeting(text):
            return Intent.GREETING
        if intent == Intent.GOODBYE or self.is_bye(text):
            return Intent.GOODBYE
        if intent == Intent.THANK_YOU or self.is_thank(text):
            return Intent.THANK_YOU
        if intent == Intent.SHOW_CART:
            return Intent.SHOW_CART
        return None

    @staticmethod
    def reply_for(intent: Intent | None) -> str | None:
        """Canned reply for an intent, or None when the rules must decide."""
        if intent is None:
            return None
        return _CANNED_REPLIES.get(intent)
