"""Shared test fixtures for the messenger shopping bot."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.audit.logger import AuditLogger
from src.config import BotConfig
from src.models import Product


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


@pytest.fixture
def config() -> BotConfig:
    return make_config()


# --- Factory functions for test data ---


def make_config(**kwargs: Any) -> BotConfig:
    """Factory for BotConfig with sensible defaults."""
    defaults: dict[str, Any] = {
        "page_access_token": "page-token",
        "verify_token": "verify-me",
        "backend_url": "http://backend.test",
        "image_preprocess_url": "http://detector.test",
        "bot_root_url": "https://bot.test",
    }
    defaults.update(kwargs)
    return BotConfig(**defaults)


def make_product(**kwargs: Any) -> Product:
    """Factory for Product with sensible defaults."""
    defaults: dict[str, Any] = {
        "productid": "HT-1000",
        "name": "Running Shoe",
        "price": 89.9,
        "priceCurrency": "USD",
        "inventoryLevel": 12,
        "image": "https://img.test/HT-1000.jpg",
        "score": 0.97,
    }
    defaults.update(kwargs)
    return Product(**defaults)


def make_messaging_event(
    sender_id: str = "psid-1",
    text: str | None = None,
    nlp: dict[str, Any] | None = None,
    attachments: list[dict[str, Any]] | None = None,
    postback: str | None = None,
) -> dict[str, Any]:
    """Factory for a raw Messenger messaging event."""
    event: dict[str, Any] = {
        "sender": {"id": sender_id},
        "recipient": {"id": "page-1"},
        "timestamp": 1700000000000,
    }
    if postback is not None:
        event["postback"] = {"title": postback, "payload": postback}
        return event
    message: dict[str, Any] = {"mid": "m-1"}
    if text is not None:
        message["text"] = text
    if nlp is not None:
        message["nlp"] = nlp
    if attachments is not None:
        message["attachments"] = attachments
    event["message"] = message
    return event


def make_nlp(intent: str | None = None, confidence: float = 0.99, **entities: str) -> dict[str, Any]:
    """Factory for platform NLP annotations."""
    payload: dict[str, Any] = {}
    if intent is not None:
        payload["intent"] = [{"value": intent, "confidence": confidence}]
    for name, value in entities.items():
        payload[name] = [{"value": value, "confidence": confidence}]
    return {"entities": payload}


def mock_async_client(responses: list[Any] | Any) -> MagicMock:
    """Build an httpx.AsyncClient replacement usable as an async context manager.

    ``responses`` feeds post/request return values; exceptions are raised.
    """
    client = AsyncMock()
    if isinstance(responses, list):
        client.post.side_effect = responses
        client.request.side_effect = responses
    else:
        client.post.return_value = responses
        client.request.return_value = responses
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    client_cls = MagicMock(return_value=client)
    client_cls.instance = client
    return client_cls


def make_response(status_code: int = 200, body: Any = None) -> MagicMock:
    """Fake httpx.Response with a JSON body."""
    resp = MagicMock(status_code=status_code)
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body if body is not None else {}
    resp.text = "" if body is None else str(body)
    return resp
