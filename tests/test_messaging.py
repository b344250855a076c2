from __future__ import annotations

import base64
import hashlib
import hmac
from collections.abc import Mapping
from typing import Any

import pytest

from pyfeeder.exceptions import FeederMessagingError, FeederTransportError, InvalidSignatureError
from pyfeeder.messaging import (
    LineMessagingClient,
    compute_signature,
    validate_signature,
    verify_signature,
)


class _RecordingTransport:
    def __init__(self, *, error: FeederTransportError | None = None) -> None:
        self._error = error
        self.calls: list[dict[str, Any]] = []

    async def request_json(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        json_body: Any = None,
    ) -> Any:
        self.calls.append({"method": method, "url": url, "headers": dict(headers or {}), "json_body": json_body})
        if self._error is not None:
            raise self._error
        return {}


# ------------------------------------------------------------------
# Signatures
# ------------------------------------------------------------------


def test_compute_signature_matches_hmac_sha256_base64() -> None:
    body = b'{"events":[]}'
    expected = base64.b64encode(hmac.new(b"secret", body, hashlib.sha256).digest()).decode()

    assert compute_signature("secret", body) == expected


def test_verify_signature() -> None:
    body = b'{"destination":"U1","events":[]}'
    signature = compute_signature("secret", body)

    assert verify_signature("secret", body, signature)
    assert not verify_signature("other-secret", body, signature)
    assert not verify_signature("secret", body + b" ", signature)
    assert not verify_signature("secret", body, None)
    assert not verify_signature("secret", body, "")


def test_validate_signature_raises() -> None:
    with pytest.raises(InvalidSignatureError):
        validate_signature("secret", b"{}", "bogus")


# ------------------------------------------------------------------
# LineMessagingClient
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_reply_payload() -> None:
    transport = _RecordingTransport()
    client = LineMessagingClient(transport, "access-token", base_url="https://api.line.example/")

    await client.reply("reply-1", "LED is now ON")

    assert transport.calls == [
        {
            "method": "POST",
            "url": "https://api.line.example/v2/bot/message/reply",
            "headers": {"authorization": "Bearer access-token"},
            "json_body": {"replyToken": "reply-1", "messages": [{"type": "text", "text": "LED is now ON"}]},
        }
    ]


@pytest.mark.asyncio
async def test_broadcast_payload() -> None:
    transport = _RecordingTransport()
    client = LineMessagingClient(transport, "access-token")

    await client.broadcast("Temperature is too high!")

    call = transport.calls[0]
    assert call["url"] == "https://api.line.me/v2/bot/message/broadcast"
    assert call["json_body"] == {"messages": [{"type": "text", "text": "Temperature is too high!"}]}


@pytest.mark.asyncio
async def test_transport_failure_becomes_messaging_error() -> None:
    error = FeederTransportError("HTTP 429", status_code=429)
    client = LineMessagingClient(_RecordingTransport(error=error), "access-token")

    with pytest.raises(FeederMessagingError):
        await client.broadcast("hello")
    with pytest.raises(FeederMessagingError):
        await client.reply("r", "hello")
