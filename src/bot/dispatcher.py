"""Inbound event dispatcher.

Routes each messaging event to the image pipeline or the intent classifier
and hands the resulting reply to the responder.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from src.bot import links, replies
from src.bot.cart import cart_products
from src.bot.classifier import IntentClassifier
from src.config import BotConfig
from src.models import Intent
from src.webhook.models import Message, MessagingEvent, Postback

if TYPE_CHECKING:
    from src.bot.image_pipeline import ImagePipeline
    from src.bot.responder import Responder

logger = logging.getLogger(__name__)

GET_STARTED = "Get Started"

_INTENT_REPLIES: dict[Intent, str] = {
    Intent.GREETING: replies.WELCOME,
    Intent.GOODBYE: replies.GOODBYE,
    Intent.THANK_YOU: replies.THANK_YOU,
}


class Dispatcher:
    """Handles one messaging event per call."""

    def __init__(
        self,
        config: BotConfig,
        responder: Responder,
        image_pipeline: ImagePipeline,
        classifier: IntentClassifier | None = None,
    ) -> None:
        self._config = config
        self._responder = responder
        self._images = image_pipeline
        self._classifier = classifier or IntentClassifier(
            persona_name=config.persona_name,
            confidence_threshold=config.nlp_confidence_threshold,
        )

    async def handle(self, event: MessagingEvent) -> None:
        sender_id = event.sender_id
        logger.info("Sender ID: %s", sender_id)
        if event.message is not None:
            await self.handle_message(sender_id, event.message)
        elif event.postback is not None:
            await self.handle_postback(sender_id, event.postback)
        else:
            logger.debug("Ignoring event without message or postback from %s", sender_id)

    async def handle_message(self, sender_id: str, message: Message) -> None:
        if message.attachments:
            for attachment in message.attachments:
                if attachment.type == "image" and attachment.payload.url:
                    await self._images.process(sender_id, attachment.payload.url)
                else:
                    logger.info("Unsupported attachment type: %s", attachment.type)
                    await self._send_canned(sender_id, Intent.INVALID_ATTACHMENT)
            return

        if not message.text:
            logger.info("Message from %s carries no text, ignoring", sender_id)
            return

        text = message.text.lower()
        nlp = message.nlp

        if self._config.enable_nlp:
            nlp_intent = self._classifier.nlp_intent(nlp)
            logger.info("Intent by platform NLP: %s", nlp_intent)
            if nlp_intent and await self._send_canned(sender_id, nlp_intent):
                return

        intent = self._classifier.classify(text, nlp, enable_nlp=self._config.enable_nlp)
        await self._responder.send(sender_id, self.reply_for_intent(intent))

    async def handle_postback(self, sender_id: str, postback: Postback) -> None:
        if postback.payload == GET_STARTED:
            logger.info("Get Started")
        else:
            logger.info("Postback from %s: %s", sender_id, postback.payload)
        await self._responder.send(sender_id, replies.text_reply(replies.WELCOME))

    def reply_for_intent(self, intent: Intent | None) -> dict[str, Any]:
        """Reply payload for a classified intent; unknown intents get the fallback text."""
        if intent == Intent.SHOW_CART:
            return self.cart_summary()
        if intent in _INTENT_REPLIES:
            return replies.text_reply(_INTENT_REPLIES[intent])
        return replies.text_reply(replies.FALLBACK)

    def cart_summary(self) -> dict[str, Any]:
        products = cart_products()
        url = links.view_products_url(self._config.view_product_url, products)
        return replies.list_template(products, url)

    async def _send_canned(self, sender_id: str, intent: Intent) -> bool:
        reply = self._classifier.reply_for(intent)
        if reply is None:
            return False
        await self._responder.send(sender_id, replies.text_reply(reply))
        return True
