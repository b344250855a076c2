"""Chat transport client for the LINE Messaging API.

Covers the two outbound calls the service needs (reply to an inbound event,
broadcast to every follower) and verification of inbound webhook signatures.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from typing import Any, Protocol

from pyfeeder._constants import LINE_API_URL
from pyfeeder._transport import Transport
from pyfeeder.exceptions import FeederMessagingError, FeederTransportError, InvalidSignatureError

_REPLY_ENDPOINT = "/v2/bot/message/reply"
_BROADCAST_ENDPOINT = "/v2/bot/message/broadcast"


class ChatTransport(Protocol):
    """Outbound side of the chat channel."""

    async def reply(self, reply_token: str, text: str) -> None:
        ...

    async def broadcast(self, text: str) -> None:
        ...


def compute_signature(channel_secret: str, body: bytes) -> str:
    """Return the base64 HMAC-SHA256 of *body* keyed with *channel_secret*."""
    digest = hmac.new(channel_secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(channel_secret: str, body: bytes, signature: str | None) -> bool:
    """Check a webhook ``X-Line-Signature`` header against the raw request body."""
    if not signature:
        return False
    return hmac.compare_digest(compute_signature(channel_secret, body), signature.strip())


def validate_signature(channel_secret: str, body: bytes, signature: str | None) -> None:
    """Raise `InvalidSignatureError` unless *signature* matches *body*."""
    if not verify_signature(channel_secret, body, signature):
        raise InvalidSignatureError("Webhook signature mismatch")


def _text_message(text: str) -> dict[str, str]:
    return {"type": "text", "text": text}


class LineMessagingClient:
    """`ChatTransport` backed by the LINE Messaging API."""

    def __init__(
        self,
        transport: Transport,
        channel_access_token: str,
        *,
        base_url: str = LINE_API_URL,
    ) -> None:
        self._transport = transport
        self._headers = {"authorization": f"Bearer {channel_access_token}"}
        self._base_url = base_url.rstrip("/")

    async def _post(self, endpoint: str, payload: dict[str, Any]) -> None:
        try:
            await self._transport.request_json(
                "POST",
                f"{self._base_url}{endpoint}",
                headers=self._headers,
                json_body=payload,
            )
        except FeederTransportError as exc:
            raise FeederMessagingError(f"{endpoint} failed: {exc}") from exc

    async def reply(self, reply_token: str, text: str) -> None:
        """Answer the inbound event identified by *reply_token*."""
        await self._post(
            _REPLY_ENDPOINT,
            {"replyToken": reply_token, "messages": [_text_message(text)]},
        )

    async def broadcast(self, text: str) -> None:
        """Send *text* to every follower of the channel."""
        await self._post(_BROADCAST_ENDPOINT, {"messages": [_text_message(text)]})
