"""Change monitor: poll the store and broadcast sensor transitions.

Each tick fetches the whole state tree, compares the monitored fields with
the previously fetched snapshot and broadcasts one message per field whose
value changed to a state with a known message. Notifications fire on
transitions, not on levels.

The previous snapshot starts as the zero-value snapshot, so non-zero sensor
values on the very first tick are reported as transitions.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from pyfeeder._constants import DEFAULT_POLL_INTERVAL
from pyfeeder.exceptions import FeederMessagingError, FeederStoreError
from pyfeeder.messaging import ChatTransport
from pyfeeder.models.state import StateSnapshot
from pyfeeder.store import RemoteStore

_logger = logging.getLogger(__name__)

TEMPERATURE_TOO_LOW = "Temperature is too low!"
TEMPERATURE_OK = "Temperature is now okay."
TEMPERATURE_TOO_HIGH = "Temperature is too high!"
QUALITY_TOO_LOW = "Quality is too low!"
QUALITY_OK = "Quality is now okay."

# Field -> new value -> message. Values without an entry produce no notification.
# Quality 0 and 2 share a message.
_TRANSITION_MESSAGES: dict[str, dict[int, str]] = {
    "temperature_state": {
        0: TEMPERATURE_TOO_LOW,
        1: TEMPERATURE_OK,
        2: TEMPERATURE_TOO_HIGH,
    },
    "quality_state": {
        0: QUALITY_TOO_LOW,
        1: QUALITY_OK,
        2: QUALITY_TOO_LOW,
    },
}


def detect_transitions(previous: StateSnapshot, current: StateSnapshot) -> list[str]:
    """Return the notification messages for fields that changed between two snapshots."""
    messages: list[str] = []
    for field_name, mapping in _TRANSITION_MESSAGES.items():
        new_value = getattr(current, field_name)
        if new_value == getattr(previous, field_name):
            continue
        message = mapping.get(new_value)
        if message is not None:
            messages.append(message)
    return messages


class ChangeMonitor:
    """Background polling loop over the shared store.

    `tick` runs a single poll step and can be driven directly; `start`
    schedules `run` (tick, sleep, repeat) as an asyncio task and `stop`
    cancels it.
    """

    def __init__(
        self,
        store: RemoteStore,
        chat: ChatTransport,
        *,
        interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._store = store
        self._chat = chat
        self._interval = interval
        self._previous = StateSnapshot()
        self._task: asyncio.Task[None] | None = None

    @property
    def previous(self) -> StateSnapshot:
        """Last successfully fetched snapshot (zero-value before the first one)."""
        return self._previous

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def tick(self) -> list[str]:
        """Fetch, compare, notify and advance the previous snapshot.

        Returns the notification messages produced by this tick. A failed
        fetch leaves the previous snapshot untouched and returns ``[]``.
        """
        try:
            current = await self._store.fetch_snapshot()
        except FeederStoreError:
            _logger.warning("Error reading database", exc_info=True)
            return []

        messages = detect_transitions(self._previous, current)
        for message in messages:
            await self._notify(message)
        self._previous = current
        return messages

    async def _notify(self, message: str) -> None:
        try:
            await self._chat.broadcast(message)
        except FeederMessagingError:
            _logger.warning("Failed to send notification %r", message, exc_info=True)
        else:
            _logger.info("Notification sent: %s", message)

    async def run(self) -> None:
        """Poll forever. Only cancellation ends the loop."""
        _logger.info("Change monitor started (interval=%ss)", self._interval)
        while True:
            try:
                await self.tick()
            except Exception:
                _logger.exception("Unexpected error in change monitor tick")
            await asyncio.sleep(self._interval)

    def start(self) -> asyncio.Task[None]:
        """Schedule `run` on the running loop; a no-op when already running."""
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run(), name="pyfeeder-change-monitor")
        return self._task

    async def stop(self) -> None:
        """Cancel the polling task and wait for it to finish."""
        task = self._task
        self._task = None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        _logger.info("Change monitor stopped")
