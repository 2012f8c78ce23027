"""Tests for intent classification rules and NLP annotation parsing."""

from __future__ import annotations

import pytest

from src.bot import replies
from src.bot.classifier import IntentClassifier
from src.models import Intent
from tests.conftest import make_nlp


@pytest.fixture
def classifier() -> IntentClassifier:
    return IntentClassifier(persona_name="milton", confidence_threshold=0.5)


class TestGreetingRule:
    @pytest.mark.parametrize("text", ["hi", "hi there", "oh hi friend", "hey", "hello bot", "ola", "olá", "ciao!", "greetings"])
    def test_greeting_words_match(self, classifier: IntentClassifier, text: str) -> None:
        assert classifier.classify(text) == Intent.GREETING

    def test_hi_addressed_to_persona_is_suppressed(self, classifier: IntentClassifier) -> None:
        assert classifier.is_greeting("hi milton, how are you") is False

    @pytest.mark.parametrize("word", ["hey", "hello", "ola", "olá", "ciao"])
    def test_each_word_suppressed_by_persona_address(
        self, classifier: IntentClassifier, word: str,
    ) -> None:
        assert classifier.is_greeting(f"{word} milton, i need shoes") is False

    def test_hi_without_trailing_space_inside_word_is_not_greeting(
        self, classifier: IntentClassifier,
    ) -> None:
        assert classifier.is_greeting("this") is False

    def test_persona_name_is_configurable(self) -> None:
        classifier = IntentClassifier(persona_name="Ana")
        assert classifier.is_greeting("hi ana, thanks") is False
        assert classifier.is_greeting("hi milton, thanks") is True

    def test_greetings_entity_yields_greeting(self, classifier: IntentClassifier) -> None:
        nlp = make_nlp(greetings="true")
        assert classifier.classify("good morning", nlp) == Intent.GREETING


class TestByeAndThanksRules:
    @pytest.mark.parametrize("text", ["bye", "bye bye", "good bye", "ok, goodbye then"])
    def test_bye(self, classifier: IntentClassifier, text: str) -> None:
        assert classifier.classify(text) == Intent.GOODBYE

    @pytest.mark.parametrize("text", ["thanks a lot", "thank you", "muchas gracias"])
    def test_thanks(self, classifier: IntentClassifier, text: str) -> None:
        assert classifier.classify(text) == Intent.THANK_YOU

    def test_unmatched_text_has_no_intent(self, classifier: IntentClassifier) -> None:
        assert classifier.classify("what shoes do you sell") is None


class TestRulePriority:
    def test_greeting_beats_bye(self, classifier: IntentClassifier) -> None:
        assert classifier.classify("hello and bye") == Intent.GREETING

    def test_bye_beats_thanks(self, classifier: IntentClassifier) -> None:
        assert classifier.classify("thanks, bye") == Intent.GOODBYE

    def test_nlp_goodbye_intent(self, classifier: IntentClassifier) -> None:
        assert classifier.classify("see you", make_nlp("GoodBye")) == Intent.GOODBYE

    def test_nlp_show_cart_intent(self, classifier: IntentClassifier) -> None:
        assert classifier.classify("my cart please", make_nlp("ShowCart")) == Intent.SHOW_CART

    def test_nlp_intent_ignored_when_disabled(self, classifier: IntentClassifier) -> None:
        result = classifier.classify("my cart please", make_nlp("ShowCart"), enable_nlp=False)
        assert result is None


class TestNlpParsing:
    def test_first_intent_returned(self, classifier: IntentClassifier) -> None:
        nlp = {"entities": {"intent": [
            {"value": "ThankYou", "confidence": 0.9},
            {"value": "GoodBye", "confidence": 0.8},
        ]}}
        assert classifier.nlp_intent(nlp) == Intent.THANK_YOU

    def test_low_confidence_intent_dropped(self, classifier: IntentClassifier) -> None:
        assert classifier.nlp_intent(make_nlp("ThankYou", confidence=0.2)) is None

    def test_unknown_intent_dropped(self, classifier: IntentClassifier) -> None:
        assert classifier.nlp_intent(make_nlp("OrderPizza")) is None

    @pytest.mark.parametrize("nlp", [None, {}, {"entities": {}}, {"entities": {"intent": []}}, {"entities": "x"}])
    def test_missing_annotations(self, classifier: IntentClassifier, nlp: object) -> None:
        assert classifier.nlp_intent(nlp) is None  # type: ignore[arg-type]

    def test_entity_value(self, classifier: IntentClassifier) -> None:
        assert classifier.nlp_entity(make_nlp(greetings="true"), "greetings") == "true"
        assert classifier.nlp_entity(make_nlp(), "greetings") is None


class TestCannedReplies:
    def test_greeting_reply(self) -> None:
        assert IntentClassifier.reply_for(Intent.GREETING) == replies.WELCOME

    def test_invalid_attachment_reply(self) -> None:
        assert IntentClassifier.reply_for(Intent.INVALID_ATTACHMENT) == replies.INVALID_ATTACHMENT

    @pytest.mark.parametrize("intent", [Intent.GOODBYE, Intent.THANK_YOU, Intent.SHOW_CART, None])
    def test_no_canned_reply(self, intent: Intent | None) -> None:
        assert IntentClassifier.reply_for(intent) is None
