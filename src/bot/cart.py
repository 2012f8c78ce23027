"""Demo shopping cart shown for the ShowCart intent and the cart page."""

from __future__ import annotations

from src.models import Product

DEMO_CART: tuple[Product, ...] = (
    Product(
        productid="HT-1000",
        name="Running Shoe Air",
        price=89.9,
        priceCurrency="USD",
        inventoryLevel=12,
        image="https://smbmkt.example.com/images/HT-1000.jpg",
        score=0.97,
    ),
    Product(
        productid="HT-1001",
        name="Trail Runner Pro",
        price=119.0,
        priceCurrency="USD",
        inventoryLevel=4,
        image="https://smbmkt.example.com/images/HT-1001.jpg",
        score=0.91,
    ),
    Product(
        productid="HT-1002",
        name="Canvas Sneaker Classic",
        price=49.5,
        priceCurrency="USD",
        inventoryLevel=30,
        image="https://smbmkt.example.com/images/HT-1002.jpg",
        score=0.86,
    ),
)


def cart_products() -> list[Product]:
    return list(DEMO_CART)
