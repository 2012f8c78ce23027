"""Image search pipeline.

Stages:
1. Object detection (optional, ``ENABLE_DETECTOR``)
2. Item similarity lookup on the backend
3. Reply construction: no match, single product card, or product list
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from src.backend.client import BackendClient, ServiceResult
from src.bot import links, replies
from src.config import BotConfig
from src.models import AuditEvent, AuditEventType, Product

if TYPE_CHECKING:
    from src.audit.logger import AuditLogger
    from src.bot.responder import Responder

logger = logging.getLogger(__name__)


def parse_similarity_result(body: Any) -> list[Product]:
    """Normalize the similarity service body into an ordered product list.

    Accepts a bare list or an object wrapping it under ``similarItems``.
    Records that fail validation are dropped.
    """
    if isinstance(body, dict):
        body = body.get("similarItems", [])
    if not isinstance(body, list):
        logger.warning("Unexpected similarity result: %r", body)
        return []

    products: list[Product] = []
    for record in body:
        try:
            products.append(Product.model_validate(record))
        except ValidationError as e:
            logger.warning("Skipping malformed product record %r: %s", record, e)
    return products


def build_similarity_reply(products: list[Product], view_base_url: str) -> dict[str, Any]:
    """Reply payload for a similarity result."""
    if not products:
        return replies.text_reply(replies.NO_MATCHED_PRODUCT)
    if len(products) == 1:
        product = products[0]
        url = links.product_url(view_base_url, product)
        logger.debug("Product view url %s", url)
        return replies.generic_template(product, url)
    url = links.view_products_url(view_base_url, products)
    logger.debug("View products url %s", url)
    return replies.list_template(products, url)


class ImagePipeline:
    """Turns an image attachment into a product search reply."""

    def __init__(
        self,
        config: BotConfig,
        responder: Responder,
        backend: BackendClient | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._config = config
        self._responder = responder
        self._backend = backend or BackendClient(config)
        self._audit = audit_logger

    async def process(self, sender_id: str, image_url: str) -> None:
        """Run the full pipeline for one image and send the reply."""

        # Stage 1: Object detection
        if self._config.enable_detector:
            detection = await self._backend.detect_objects(image_url)
            if not detection.ok:
                logger.error(
                    "Detector %s failed for %s: %s",
                    self._config.detector, image_url, detection.message,
                )
                self._log_lookup(sender_id, "detect", "failure", detection)
                await self._responder.send(
                    sender_id, replies.text_reply(replies.GENERIC_API_ERROR),
                )
                return
            if self._backend.no_object_detected(detection):
                logger.info("No object detected in %s", image_url)
                self._log_lookup(sender_id, "detect", "no_object", detection)
                await self._responder.send(
                    sender_id, replies.text_reply(replies.NO_OBJECT_DETECTED),
                )
                return

        # Stage 2: Similarity lookup
        similarity = await self._backend.find_similar_items(image_url)
        if not similarity.ok:
            self._log_lookup(sender_id, "similarity", "failure", similarity)
            await self._responder.send(
                sender_id, replies.text_reply(replies.IMAGE_RESOLUTION_ERROR),
            )
            return

        # Stage 3: Reply construction
        products = parse_similarity_result(similarity.data)
        logger.info("Found %d similar products for %s", len(products), sender_id)
        self._log_lookup(
            sender_id, "similarity", "success", similarity, matches=len(products),
        )
        reply = build_similarity_reply(products, self._config.view_product_url)
        await self._responder.send(sender_id, reply)

    def _log_lookup(
        self,
        sender_id: str,
        action: str,
        result: str,
        outcome: ServiceResult,
        **extra: object,
    ) -> None:
        if not self._audit:
            return
        details: dict[str, object] = {"status_code": outcome.status_code, **extra}
        if outcome.error:
            details["error"] = outcome.error.value
            details["message"] = outcome.message
        self._audit.log(AuditEvent(
            event_type=AuditEventType.IMAGE_LOOKUP,
            sender_id=sender_id,
            action=action,
            result=result,
            details=details,
        ))
