"""Command dispatcher: one chat message in, at most one store write and exactly one reply out."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from pyfeeder._constants import FOOD_PATH, FOOD_THRESHOLD, LED_PATH, MOTOR_PATH
from pyfeeder.exceptions import FeederMessagingError, FeederStoreError
from pyfeeder.messaging import ChatTransport
from pyfeeder.models.commands import Command
from pyfeeder.store import RemoteStore

_logger = logging.getLogger(__name__)

LED_ON_REPLY = "LED is now ON"
LED_ON_FAILED_REPLY = "Failed to turn on LED"
LED_OFF_REPLY = "LED is now OFF"
LED_OFF_FAILED_REPLY = "Failed to turn off LED"
FOOD_READ_FAILED_REPLY = "Failed to retrieve food status."
TOO_MUCH_FOOD_REPLY = "Too much food!!!"
FEEDING_REPLY = "Feeding initiated!"
FEEDING_FAILED_REPLY = "Failed to activate the motor for feeding."
FOOD_LEVEL_REPLY = "Current food level: {level}%"
HELP_REPLY = (
    "Send 'led on' or 'led off' to control the LED, "
    "'feed' to activate feeding or 'Check food status' to check the food level."
)

_Handler = Callable[[], Awaitable[str]]


class CommandDispatcher:
    """Map chat text to store reads/writes and a single reply.

    The dispatcher keeps no state between calls; concurrent `dispatch`
    invocations only share the injected store and chat clients.
    """

    def __init__(
        self,
        store: RemoteStore,
        chat: ChatTransport,
        *,
        food_threshold: int = FOOD_THRESHOLD,
    ) -> None:
        self._store = store
        self._chat = chat
        self._food_threshold = food_threshold
        self._handlers: dict[Command, _Handler] = {
            Command.LED_ON: self._led_on,
            Command.LED_OFF: self._led_off,
            Command.FEED: self._feed,
            Command.CHECK_FOOD: self._check_food,
        }

    async def dispatch(self, text: str, reply_token: str) -> None:
        """Handle one inbound text message and reply to *reply_token*."""
        command = Command.parse(text)
        if command is None:
            reply = HELP_REPLY
        else:
            _logger.debug("Dispatching command %r", command.value)
            reply = await self._handlers[command]()
        await self._reply(reply_token, reply)

    async def _reply(self, reply_token: str, text: str) -> None:
        try:
            await self._chat.reply(reply_token, text)
        except FeederMessagingError:
            _logger.warning("Failed to send reply %r", text, exc_info=True)

    async def _set_led(self, value: int, ok: str, failed: str) -> str:
        try:
            await self._store.set_int(LED_PATH, value)
        except FeederStoreError:
            _logger.warning("Error setting LED state to %s", value, exc_info=True)
            return failed
        return ok

    async def _led_on(self) -> str:
        return await self._set_led(1, LED_ON_REPLY, LED_ON_FAILED_REPLY)

    async def _led_off(self) -> str:
        return await self._set_led(0, LED_OFF_REPLY, LED_OFF_FAILED_REPLY)

    async def _feed(self) -> str:
        # Read-then-write is not atomic; the device may change the level in between.
        try:
            level = await self._store.get_int(FOOD_PATH)
        except FeederStoreError:
            _logger.warning("Error reading food level", exc_info=True)
            return FOOD_READ_FAILED_REPLY

        if level > self._food_threshold:
            return TOO_MUCH_FOOD_REPLY

        try:
            await self._store.set_int(MOTOR_PATH, 1)
        except FeederStoreError:
            _logger.warning("Error starting feeding motor", exc_info=True)
            return FEEDING_FAILED_REPLY
        return FEEDING_REPLY

    async def _check_food(self) -> str:
        try:
            level = await self._store.get_int(FOOD_PATH)
        except FeederStoreError:
            _logger.warning("Error reading food level", exc_info=True)
            return FOOD_READ_FAILED_REPLY
        return FOOD_LEVEL_REPLY.format(level=level)
