"""aiohttp application exposing the chat webhook endpoint.

Status codes reflect transport-level validation only: a command whose
store write fails still answers 200, since the user already got a failure
reply through the chat channel.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from aiohttp import web
from pydantic import ValidationError

from pyfeeder._constants import DEFAULT_WEBHOOK_PATH, LINE_SIGNATURE_HEADER
from pyfeeder.dispatcher import CommandDispatcher
from pyfeeder.exceptions import InvalidSignatureError
from pyfeeder.messaging import validate_signature
from pyfeeder.models.webhook import WebhookPayload
from pyfeeder.monitor import ChangeMonitor

_logger = logging.getLogger(__name__)

DISPATCHER_KEY = web.AppKey("dispatcher", CommandDispatcher)
CHANNEL_SECRET_KEY = web.AppKey("channel_secret", str)
MONITOR_KEY = web.AppKey("monitor", ChangeMonitor)


async def handle_webhook(request: web.Request) -> web.Response:
    """Validate a webhook delivery and dispatch its text messages in order."""
    body = await request.read()
    try:
        validate_signature(
            request.app[CHANNEL_SECRET_KEY],
            body,
            request.headers.get(LINE_SIGNATURE_HEADER),
        )
    except InvalidSignatureError:
        _logger.warning("Rejected webhook delivery with invalid signature")
        return web.Response(status=400)

    try:
        payload = WebhookPayload.model_validate_json(body)
    except ValidationError:
        _logger.warning("Malformed webhook payload", exc_info=True)
        return web.Response(status=500)

    dispatcher = request.app[DISPATCHER_KEY]
    try:
        for reply_token, text in payload.text_messages():
            await dispatcher.dispatch(text, reply_token)
    except Exception:
        _logger.exception("Webhook dispatch failed")
        return web.Response(status=500)

    return web.Response(status=200, text="OK")


async def _monitor_lifecycle(app: web.Application) -> AsyncIterator[None]:
    monitor = app[MONITOR_KEY]
    monitor.start()
    yield
    await monitor.stop()


def create_app(
    dispatcher: CommandDispatcher,
    channel_secret: str,
    *,
    path: str = DEFAULT_WEBHOOK_PATH,
    monitor: ChangeMonitor | None = None,
) -> web.Application:
    """Build the webhook application.

    When *monitor* is given it runs for as long as the application does.
    """
    app = web.Application()
    app[DISPATCHER_KEY] = dispatcher
    app[CHANNEL_SECRET_KEY] = channel_secret
    app.router.add_post(path, handle_webhook)
    if monitor is not None:
        app[MONITOR_KEY] = monitor
        app.cleanup_ctx.append(_monitor_lifecycle)
    return app
