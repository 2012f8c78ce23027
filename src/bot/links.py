"""Product view deep links.

The product view route receives its data as base64-encoded JSON in the
``data`` query parameter: ``{"selectedProduct": {...}, "similarProducts": [...]}``.
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Sequence
from urllib.parse import quote

from pydantic import ValidationError

from src.models import Product, ProductView


class InvalidLinkDataError(Exception):
    """Raised when a deep link data parameter cannot be decoded."""


def encode_data(view: ProductView) -> str:
    raw = json.dumps(view.model_dump(by_alias=True), separators=(",", ":"), ensure_ascii=False)
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode_data(data: str) -> ProductView:
    """Decode a data parameter back into a ProductView.

    Unescaped links lose their ``+`` to query parsing, so spaces are read
    back as ``+``.
    """
    try:
        raw = base64.b64decode(data.replace(" ", "+"), validate=True).decode("utf-8")
        return ProductView.model_validate(json.loads(raw))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
        raise InvalidLinkDataError(f"Invalid product data: {e}") from e


def product_url(base_url: str, product: Product) -> str:
    """URL of the product view for a single selected product."""
    return base_url + quote(encode_data(ProductView(selected_product=product)), safe="")


def view_products_url(base_url: str, products: Sequence[Product]) -> str:
    """URL of the product view listing every match, the first one selected."""
    view = ProductView(selected_product=products[0], similar_products=list(products))
    return base_url + quote(encode_data(view), safe="")


def products_page_data(view: ProductView) -> dict[str, object]:
    """Data shown on the product view: the selection plus the other matches."""
    selected = view.selected_product
    return {
        "selectedProduct": selected.to_wire(),
        "similarProducts": [
            p.to_wire() for p in view.similar_products
            if p.productid != selected.productid
        ],
    }
