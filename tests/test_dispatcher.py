from __future__ import annotations

import asyncio

import pytest

from pyfeeder._constants import ACTUATOR_PATHS
from pyfeeder.dispatcher import (
    FEEDING_FAILED_REPLY,
    FEEDING_REPLY,
    FOOD_READ_FAILED_REPLY,
    HELP_REPLY,
    LED_OFF_FAILED_REPLY,
    LED_OFF_REPLY,
    LED_ON_FAILED_REPLY,
    LED_ON_REPLY,
    TOO_MUCH_FOOD_REPLY,
    CommandDispatcher,
)
from pyfeeder.exceptions import FeederMessagingError, FeederStoreError
from pyfeeder.models.commands import Command
from pyfeeder.models.state import StateSnapshot


class _FakeStore:
    def __init__(
        self,
        values: dict[str, int] | None = None,
        *,
        fail_reads: bool = False,
        fail_writes: bool = False,
    ) -> None:
        self.values = dict(values or {})
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.reads: list[str] = []
        self.writes: list[tuple[str, int]] = []

    async def get_int(self, path: str) -> int:
        self.reads.append(path)
        if self.fail_reads:
            raise FeederStoreError(f"read {path} failed", path=path)
        return self.values.get(path, 0)

    async def set_int(self, path: str, value: int) -> None:
        if self.fail_writes:
            raise FeederStoreError(f"write {path} failed", path=path)
        self.writes.append((path, value))
        self.values[path] = value

    async def fetch_snapshot(self) -> StateSnapshot:  # pragma: no cover
        return StateSnapshot()


class _FakeChat:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.replies: list[tuple[str, str]] = []
        self.broadcasts: list[str] = []

    async def reply(self, reply_token: str, text: str) -> None:
        if self.fail:
            raise FeederMessagingError("reply failed")
        self.replies.append((reply_token, text))

    async def broadcast(self, text: str) -> None:  # pragma: no cover
        self.broadcasts.append(text)


async def _dispatch(store: _FakeStore, text: str) -> _FakeChat:
    chat = _FakeChat()
    await CommandDispatcher(store, chat).dispatch(text, "token-1")
    return chat


# ------------------------------------------------------------------
# LED
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_led_on_writes_one_and_confirms() -> None:
    store = _FakeStore()
    chat = await _dispatch(store, "led on")

    assert store.writes == [("led/state", 1)]
    assert chat.replies == [("token-1", LED_ON_REPLY)]


@pytest.mark.asyncio
async def test_led_off_writes_zero_and_confirms() -> None:
    store = _FakeStore({"led/state": 1})
    chat = await _dispatch(store, "led off")

    assert store.writes == [("led/state", 0)]
    assert chat.replies == [("token-1", LED_OFF_REPLY)]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("text", "expected"),
    [("led on", LED_ON_FAILED_REPLY), ("led off", LED_OFF_FAILED_REPLY)],
)
async def test_led_write_failure_replies_failure(text: str, expected: str) -> None:
    store = _FakeStore(fail_writes=True)
    chat = await _dispatch(store, text)

    assert store.writes == []
    assert chat.replies == [("token-1", expected)]


# ------------------------------------------------------------------
# Feed
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_feed_refused_when_food_above_threshold() -> None:
    store = _FakeStore({"food/state": 31})
    chat = await _dispatch(store, "feed")

    assert store.writes == []
    assert chat.replies == [("token-1", TOO_MUCH_FOOD_REPLY)]


@pytest.mark.asyncio
async def test_feed_starts_motor_below_threshold() -> None:
    store = _FakeStore({"food/state": 29})
    chat = await _dispatch(store, "feed")

    assert store.writes == [("motor/state", 1)]
    assert chat.replies == [("token-1", FEEDING_REPLY)]


@pytest.mark.asyncio
async def test_feed_at_threshold_is_allowed() -> None:
    store = _FakeStore({"food/state": 30})
    chat = await _dispatch(store, "feed")

    assert store.writes == [("motor/state", 1)]
    assert chat.replies == [("token-1", FEEDING_REPLY)]


@pytest.mark.asyncio
async def test_feed_read_failure_skips_write() -> None:
    store = _FakeStore(fail_reads=True)
    chat = await _dispatch(store, "feed")

    assert store.writes == []
    assert chat.replies == [("token-1", FOOD_READ_FAILED_REPLY)]


@pytest.mark.asyncio
async def test_feed_motor_write_failure() -> None:
    store = _FakeStore({"food/state": 5}, fail_writes=True)
    chat = await _dispatch(store, "feed")

    assert store.reads == ["food/state"]
    assert chat.replies == [("token-1", FEEDING_FAILED_REPLY)]


@pytest.mark.asyncio
async def test_custom_food_threshold() -> None:
    store = _FakeStore({"food/state": 15})
    chat = _FakeChat()
    await CommandDispatcher(store, chat, food_threshold=10).dispatch("feed", "t")

    assert store.writes == []
    assert chat.replies == [("t", TOO_MUCH_FOOD_REPLY)]


# ------------------------------------------------------------------
# Check food status
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_check_food_status_embeds_level() -> None:
    store = _FakeStore({"food/state": 42})
    chat = await _dispatch(store, "Check food status")

    assert store.writes == []
    assert len(chat.replies) == 1
    assert "42" in chat.replies[0][1]
    assert chat.replies[0][1] == "Current food level: 42%"


@pytest.mark.asyncio
async def test_check_food_status_read_failure() -> None:
    store = _FakeStore(fail_reads=True)
    chat = await _dispatch(store, "Check food status")

    assert chat.replies == [("token-1", FOOD_READ_FAILED_REPLY)]


# ------------------------------------------------------------------
# Unrecognised input
# ------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["LED ON", "led on ", " feed", "Feed", "check food status", "", "hello"])
async def test_unrecognised_text_gets_help_and_no_store_access(text: str) -> None:
    store = _FakeStore({"food/state": 1})
    chat = await _dispatch(store, text)

    assert store.reads == []
    assert store.writes == []
    assert chat.replies == [("token-1", HELP_REPLY)]


@pytest.mark.asyncio
@pytest.mark.parametrize("command", list(Command))
async def test_every_command_replies_once_and_writes_at_most_once(command: Command) -> None:
    store = _FakeStore({"food/state": 10})
    chat = await _dispatch(store, command.value)

    assert len(chat.replies) == 1
    assert len(store.writes) <= 1
    for path, _value in store.writes:
        assert path in ACTUATOR_PATHS


@pytest.mark.asyncio
async def test_reply_failure_is_not_raised() -> None:
    store = _FakeStore()
    chat = _FakeChat(fail=True)

    await CommandDispatcher(store, chat).dispatch("led on", "token-1")

    assert store.writes == [("led/state", 1)]


@pytest.mark.asyncio
async def test_concurrent_dispatches_are_independent() -> None:
    store = _FakeStore({"food/state": 42})
    chat = _FakeChat()
    dispatcher = CommandDispatcher(store, chat)

    await asyncio.gather(
        dispatcher.dispatch("led on", "a"),
        dispatcher.dispatch("Check food status", "b"),
        dispatcher.dispatch("nope", "c"),
    )

    assert sorted(chat.replies) == sorted(
        [("a", LED_ON_REPLY), ("b", "Current food level: 42%"), ("c", HELP_REPLY)]
    )
