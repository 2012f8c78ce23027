"""Messenger Send API responder.

Sends one reply per call. When the platform rejects a reply with an error
message, one follow-up text carrying that message is attempted; there is no
further retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from src.bot import replies
from src.config import BotConfig
from src.models import AuditEvent, AuditEventType

if TYPE_CHECKING:
    from src.audit.logger import AuditLogger

logger = logging.getLogger(__name__)

_MAX_ERROR_RESENDS = 1


@dataclass
class SendResult:
    delivered: bool
    attempts: int
    status_code: int | None = None
    provider_error: str | None = None


def _provider_error(body: Any) -> str | None:
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return None


class Responder:
    """Delivers reply payloads to a Messenger recipient."""

    def __init__(self, config: BotConfig, audit_logger: AuditLogger | None = None) -> None:
        self._config = config
        self._audit = audit_logger

    async def send(self, sender_id: str, payload: dict[str, Any]) -> SendResult:
        """POST a message to the Send API for sender_id."""
        if not payload:
            raise ValueError("reply payload must not be empty")

        params = {"access_token": self._config.page_access_token}
        message = payload
        attempts = 0
        status_code: int | None = None
        provider_error: str | None = None

        async with httpx.AsyncClient(verify=True) as client:
            while True:
                attempts += 1
                request_body = {"recipient": {"id": sender_id}, "message": message}
                body: Any = None
                try:
                    resp = await client.post(
                        self._config.send_api_url,
                        params=params,
                        json=request_body,
                        timeout=self._config.http_timeout,
                    )
                    status_code = resp.status_code
                    if status_code == 200:
                        logger.info("Message sent to %s", sender_id)
                        self._log_result(sender_id, AuditEventType.MESSAGE_SENT, attempts, status_code)
                        return SendResult(
                            delivered=True,
                            attempts=attempts,
                            status_code=status_code,
                            provider_error=provider_error,
                        )
                    try:
                        body = resp.json()
                    except ValueError:
                        body = resp.text
                except httpx.HTTPError as exc:
                    status_code = None
                    logger.error("Unable to send message to %s: %s", sender_id, exc)

                logger.error("Send API response status: %s, body: %s", status_code, body)
                self._log_result(
                    sender_id, AuditEventType.MESSAGE_FAILED, attempts, status_code, body,
                )

                provider_error = _provider_error(body)
                if provider_error is None or attempts > _MAX_ERROR_RESENDS:
                    return SendResult(
                        delivered=False,
                        attempts=attempts,
                        status_code=status_code,
                        provider_error=provider_error,
                    )
                message = replies.text_reply(f"{replies.SEND_API_ERROR_PREFIX} {provider_error}")

    def _log_result(
        self,
        sender_id: str,
        event_type: AuditEventType,
        attempt: int,
        status_code: int | None,
        body: Any = None,
    ) -> None:
        if not self._audit:
            return
        details: dict[str, object] = {"attempt": attempt, "status_code": status_code}
        if body is not None:
            details["body"] = body
        self._audit.log(AuditEvent(
            event_type=event_type,
            sender_id=sender_id,
            action="send_message",
            result="success" if event_type == AuditEventType.MESSAGE_SENT else "failure",
            details=details,
        ))
