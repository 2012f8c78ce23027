"""Data models for inbound Messenger webhook deliveries."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AttachmentPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    url: str | None = None


class Attachment(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    payload: AttachmentPayload = Field(default_factory=AttachmentPayload)


class Message(BaseModel):
    """A user message: free text, NLP annotations and/or attachments."""

    model_config = ConfigDict(extra="allow")

    mid: str | None = None
    text: str | None = None
    nlp: dict[str, Any] | None = None
    attachments: list[Attachment] | None = None


class Postback(BaseModel):
    model_config = ConfigDict(extra="allow")

    payload: str = ""
    title: str | None = None


class Sender(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str


class MessagingEvent(BaseModel):
    """Normalized inbound event: one sender and at most one of message/postback."""

    model_config = ConfigDict(extra="allow")

    sender: Sender
    message: Message | None = None
    postback: Postback | None = None

    @model_validator(mode="after")
    def _single_kind(self) -> MessagingEvent:
        if self.message is not None and self.postback is not None:
            raise ValueError("event carries both a message and a postback")
        return self

    @property
    def sender_id(self) -> str:
        return self.sender.id


class WebhookEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    messaging: list[MessagingEvent] = Field(default_factory=list)


class WebhookPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    object: str
    entry: list[WebhookEntry] = Field(default_factory=list)
