"""Shared Pydantic data models for the messenger shopping bot."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class Intent(str, Enum):
    GREETING = "Greeting"
    GOODBYE = "GoodBye"
    THANK_YOU = "ThankYou"
    SHOW_CART = "ShowCart"
    INVALID_ATTACHMENT = "InvalidAttachment"


class AuditEventType(str, Enum):
    WEBHOOK_VERIFIED = "webhook_verified"
    WEBHOOK_REJECTED = "webhook_rejected"
    EVENT_RECEIVED = "event_received"
    MESSAGE_SENT = "message_sent"
    MESSAGE_FAILED = "message_failed"
    IMAGE_LOOKUP = "image_lookup"


# --- Catalog Models ---


class Product(BaseModel):
    """One product match as returned by the item similarity service.

    Only ``productid`` is required. Display fields may be null, and fields
    the service adds beyond these are kept so deep links carry the whole
    record.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    productid: str | int
    name: str | None = ""
    price: int | float | str | None = 0
    price_currency: str | None = Field(default="", alias="priceCurrency")
    inventory_level: int | str | None = Field(default=0, alias="inventoryLevel")
    image: str | None = ""
    score: int | float | str | None = 0

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)


class ProductView(BaseModel):
    """Payload carried in the product view deep link."""

    model_config = ConfigDict(populate_by_name=True)

    selected_product: Product = Field(alias="selectedProduct")
    similar_products: list[Product] = Field(default_factory=list, alias="similarProducts")


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    sender_id: str | None = None
    action: str
    result: str  # "success" | "failure" | "rejected"
    details: dict[str, object] | None = None
