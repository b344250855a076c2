"""Chat command vocabulary."""

from __future__ import annotations

import enum


class Command(enum.StrEnum):
    """Recognised chat commands.

    Matching is exact and case-sensitive: ``"LED ON"`` or ``"led on "``
    are not commands.
    """

    LED_ON = "led on"
    LED_OFF = "led off"
    FEED = "feed"
    CHECK_FOOD = "Check food status"

    @classmethod
    def parse(cls, text: str) -> Command | None:
        """Return the command for *text*, or ``None`` when it is not recognised."""
        try:
            return cls(text)
        except ValueError:
            return None
