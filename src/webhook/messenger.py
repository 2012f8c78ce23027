"""Messenger webhook handling.

Covers the Meta verification challenge (GET) and extraction of messaging
events from page subscription deliveries (POST).
"""

from __future__ import annotations

import hmac
import logging
from typing import Any

from src.webhook.models import MessagingEvent, WebhookPayload

logger = logging.getLogger(__name__)

PAGE_OBJECT = "page"


class MessengerWebhook:
    """Verifies webhook subscriptions and extracts messaging events."""

    def __init__(self, verify_token: str) -> None:
        self._verify_token = verify_token

    def handle_verification(self, params: dict[str, str]) -> dict[str, Any]:
        """Handle the Meta webhook verification challenge.

        Returns the challenge with 200 on a valid subscribe request, 403 for
        anything else.
        """
        mode = params.get("hub.mode")
        token = params.get("hub.verify_token", "")
        if (
            mode == "subscribe"
            and self._verify_token
            and hmac.compare_digest(token.encode(), self._verify_token.encode())
        ):
            logger.info("WEBHOOK_VERIFIED")
            return {"status_code": 200, "content": params.get("hub.challenge", "")}
        return {"status_code": 403, "error": "Invalid verify token"}

    @staticmethod
    def is_page_subscription(body: dict[str, Any]) -> bool:
        return body.get("object") == PAGE_OBJECT

    def extract_events(self, body: dict[str, Any]) -> list[MessagingEvent]:
        """Return the first messaging event of every entry.

        The platform delivers one messaging event per entry; entries without
        events are skipped.
        """
        payload = WebhookPayload.model_validate(body)
        events: list[MessagingEvent] = []
        for entry in payload.entry:
            if not entry.messaging:
                logger.debug("Entry %s carries no messaging events", entry.id)
                continue
            if len(entry.messaging) > 1:
                logger.warning(
                    "Entry %s carries %d messaging events, only the first is handled",
                    entry.id, len(entry.messaging),
                )
            events.append(entry.messaging[0])
        return events
