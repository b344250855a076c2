"""Service wiring: one HTTP session shared by the store and chat clients."""

from __future__ import annotations

from typing import Any

import aiohttp
from aiohttp import web

from pyfeeder._transport import HttpTransport
from pyfeeder.app import create_app
from pyfeeder.config import FeederConfig
from pyfeeder.dispatcher import CommandDispatcher
from pyfeeder.exceptions import FeederError
from pyfeeder.messaging import LineMessagingClient
from pyfeeder.monitor import ChangeMonitor
from pyfeeder.store import FirebaseStore


class FeederService:
    """Owns the collaborators of a running feeder bot.

    Usage::

        async with FeederService(config) as service:
            app = service.build_app()
    """

    def __init__(
        self,
        config: FeederConfig,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._store: FirebaseStore | None = None
        self._chat: LineMessagingClient | None = None
        self._dispatcher: CommandDispatcher | None = None
        self._monitor: ChangeMonitor | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FeederService:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        transport = HttpTransport(self._http_session, timeout=self._config.request_timeout)
        self._store = FirebaseStore(
            transport,
            self._config.database_url,
            auth=self._config.database_auth,
        )
        self._chat = LineMessagingClient(
            transport,
            self._config.channel_access_token,
            base_url=self._config.messaging_api_url,
        )
        self._dispatcher = CommandDispatcher(
            self._store,
            self._chat,
            food_threshold=self._config.food_threshold,
        )
        self._monitor = ChangeMonitor(self._store, self._chat, interval=self._config.poll_interval)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._monitor is not None:
            await self._monitor.stop()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._store = None
        self._chat = None
        self._dispatcher = None
        self._monitor = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> FeederConfig:
        return self._config

    @property
    def dispatcher(self) -> CommandDispatcher:
        if self._dispatcher is None:
            raise FeederError("Service not initialized. Use 'async with FeederService(...) as service:'")
        return self._dispatcher

    @property
    def monitor(self) -> ChangeMonitor:
        if self._monitor is None:
            raise FeederError("Service not initialized. Use 'async with FeederService(...) as service:'")
        return self._monitor

    def build_app(self) -> web.Application:
        """Webhook application with the change monitor bound to its lifetime."""
        return create_app(
            self.dispatcher,
            self._config.channel_secret,
            path=self._config.webhook_path,
            monitor=self.monitor,
        )
