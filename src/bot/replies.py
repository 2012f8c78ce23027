"""Reply texts and Send API payload builders."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from src.models import Product

WELCOME = (
    "Hi, I am Milton, your shopping assistant. Send me a photo of a product "
    "you like and I will find similar items in our marketplace."
)
GOODBYE = "Bye! Come back anytime you need help with your shopping."
THANK_YOU = "You are welcome! Happy to help."
FALLBACK = (
    "Sorry, I did not get that. You can send me a photo of a product to "
    "search for similar items."
)
INVALID_ATTACHMENT = "Sorry, I can only process images. Please send me a photo of a product."
NO_OBJECT_DETECTED = (
    "Sorry, I could not recognize any product in your photo. "
    "Please try another one."
)
NO_MATCHED_PRODUCT = "Sorry, no matching product was found in our marketplace."
IMAGE_RESOLUTION_ERROR = (
    "Sorry, I could not process your image. The resolution may be too high, "
    "please try a smaller one."
)
GENERIC_API_ERROR = "Sorry, something went wrong while processing your request. Please try again later."
SEND_API_ERROR_PREFIX = "Sorry, your reply could not be delivered:"

VIEW_PRODUCT_BUTTON = "View Details"
VIEW_ALL_BUTTON = "View All"


def text_reply(text: str) -> dict[str, Any]:
    return {"text": text}


def _web_button(title: str, url: str) -> dict[str, Any]:
    return {
        "type": "web_url",
        "title": title,
        "url": url,
        "webview_height_ratio": "full",
    }


def _shown(value: object) -> str:
    # null display fields render as blanks
    return "" if value is None else str(value)


def product_title(product: Product) -> str:
    return f"{product.productid}({_shown(product.score)})"


def product_subtitle(product: Product) -> str:
    return (
        f"{_shown(product.name)}\n"
        f"Price: {_shown(product.price)}{_shown(product.price_currency)}\n"
        f"In Stock: {_shown(product.inventory_level)}"
    )


def generic_template(product: Product, url: str) -> dict[str, Any]:
    """Single product card with one button linking to the product view."""
    return {
        "attachment": {
            "type": "template",
            "payload": {
                "template_type": "generic",
                "elements": [
                    {
                        "title": product_title(product),
                        "subtitle": product_subtitle(product),
                        "image_url": product.image or "",
                        "buttons": [_web_button(VIEW_PRODUCT_BUTTON, url)],
                    },
                ],
            },
        },
    }


def list_element(product: Product) -> dict[str, Any]:
    return {
        "title": product.name or str(product.productid),
        "subtitle": (
            f"Price: {_shown(product.price)}{_shown(product.price_currency)}, "
            f"In Stock: {_shown(product.inventory_level)}"
        ),
        "image_url": product.image or "",
    }


def list_template(products: Sequence[Product], url: str) -> dict[str, Any]:
    """One compact element per product, in the given order, plus a View All button."""
    return {
        "attachment": {
            "type": "template",
            "payload": {
                "template_type": "list",
                "top_element_style": "compact",
                "elements": [list_element(p) for p in products],
                "buttons": [_web_button(VIEW_ALL_BUTTON, url)],
            },
        },
    }
