"""Inbound webhook payload models.

Only the fields the dispatcher needs are modelled; anything else the chat
platform sends is ignored.
"""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _WebhookModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class MessageContent(_WebhookModel):
    """Message body of a ``message`` event."""

    type: str
    id: str | None = None
    text: str | None = None


class WebhookEvent(_WebhookModel):
    """A single event of a webhook delivery."""

    type: str
    reply_token: str | None = None
    timestamp: int | None = None
    message: MessageContent | None = None

    @property
    def is_text_message(self) -> bool:
        return (
            self.type == "message"
            and self.message is not None
            and self.message.type == "text"
            and self.message.text is not None
            and bool(self.reply_token)
        )


class WebhookPayload(_WebhookModel):
    """A webhook delivery: zero or more events."""

    destination: str | None = None
    events: list[WebhookEvent] = Field(default_factory=list)

    def text_messages(self) -> Iterator[tuple[str, str]]:
        """Yield ``(reply_token, text)`` for every text-message event, in order."""
        for event in self.events:
            if event.is_text_message:
                assert event.reply_token is not None  # noqa: S101
                assert event.message is not None and event.message.text is not None  # noqa: S101
                yield event.reply_token, event.message.text
