"""Pydantic models and enums for pyfeeder."""

from pyfeeder.models.commands import Command
from pyfeeder.models.state import StateSnapshot
from pyfeeder.models.webhook import MessageContent, WebhookEvent, WebhookPayload

__all__ = [
    "Command",
    "MessageContent",
    "StateSnapshot",
    "WebhookEvent",
    "WebhookPayload",
]
