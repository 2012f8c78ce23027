"""HTTP client for the bot's external collaborators.

Each call returns a ServiceResult instead of raising, so callers sequence
the detector, similarity and profile lookups explicitly.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from src.config import BotConfig

logger = logging.getLogger(__name__)

NO_OBJECT_DETECTED = -99


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    PROVIDER = "provider"


@dataclass
class ServiceResult:
    """Outcome of one external call."""

    ok: bool
    data: Any = None
    error: ErrorKind | None = None
    message: str = ""
    status_code: int | None = None

    @classmethod
    def success(cls, data: Any, status_code: int | None = 200) -> ServiceResult:
        return cls(ok=True, data=data, status_code=status_code)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        status_code: int | None = None,
        data: Any = None,
    ) -> ServiceResult:
        return cls(ok=False, error=kind, message=message, status_code=status_code, data=data)


def _decode_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except (json.JSONDecodeError, ValueError):
        return resp.text


async def request_json(
    method: str,
    url: str,
    *,
    timeout: float,
    json_body: dict[str, Any] | None = None,
    params: dict[str, str] | None = None,
) -> ServiceResult:
    """Issue one request and classify the outcome."""
    try:
        async with httpx.AsyncClient(verify=True) as client:
            resp = await client.request(
                method, url, json=json_body, params=params, timeout=timeout,
            )
    except httpx.HTTPError as exc:
        logger.error("%s %s failed: %s", method, url, exc)
        return ServiceResult.failure(ErrorKind.TRANSPORT, str(exc) or type(exc).__name__)

    body = _decode_body(resp)
    if resp.status_code >= 400:
        logger.error("%s %s returned %d: %s", method, url, resp.status_code, body)
        return ServiceResult.failure(
            ErrorKind.PROVIDER,
            f"HTTP {resp.status_code}",
            status_code=resp.status_code,
            data=body,
        )
    return ServiceResult.success(body, status_code=resp.status_code)


class BackendClient:
    """Calls the object detector, item similarity and user profile endpoints."""

    def __init__(self, config: BotConfig) -> None:
        self._config = config

    async def detect_objects(self, image_url: str) -> ServiceResult:
        """Run detector pre-processing on an image."""
        return await request_json(
            "POST",
            self._config.detector_url,
            timeout=self._config.http_timeout,
            json_body={"ImageUrl": image_url},
        )

    async def find_similar_items(self, image_url: str) -> ServiceResult:
        """Look up catalog items similar to an image."""
        return await request_json(
            "POST",
            self._config.similarity_url,
            timeout=self._config.http_timeout,
            json_body={"url": image_url},
        )

    async def fetch_user_location(self, user_id: str) -> ServiceResult:
        """Fetch a user's profile location from the platform."""
        return await request_json(
            "GET",
            self._config.user_profile_url(user_id),
            timeout=self._config.http_timeout,
            params={
                "fields": "location",
                "access_token": self._config.page_access_token,
            },
        )

    @staticmethod
    def no_object_detected(result: ServiceResult) -> bool:
        """True when the detector reports that no relevant object was found."""
        body = result.data
        return isinstance(body, dict) and body.get("ReturnCode") == NO_OBJECT_DETECTED
