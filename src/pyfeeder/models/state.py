"""Observable state snapshot read from the store root."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator

# Store tree node -> snapshot field. Only the nodes the monitor watches;
# a bad value anywhere else in the tree must not break a poll.
_NODE_FIELDS: dict[str, str] = {
    "temp": "temperature_state",
    "quality": "quality_state",
}


def parse_state_int(value: Any) -> int:
    """Decode a stored state value; ``null`` reads as ``0``.

    Integral floats are accepted (JSON has one number type). Booleans,
    strings and fractional numbers raise ``ValueError``.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValueError("holds a boolean, expected an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ValueError(f"holds {value!r}, expected an integer")


StateInt = Annotated[int, BeforeValidator(parse_state_int)]


class StateSnapshot(BaseModel):
    """Sensor state codes as of one poll tick.

    Validates from the store root tree, where every sensor lives under
    ``<node>/state``::

        {"temp": {"state": 1}, "quality": {"state": 2}, "food": {"state": 42}, "led": {"state": 0}}

    Nodes that are absent or ``null`` read as ``0``; nodes the snapshot does
    not track (``food``, ``led``, ``motor``) are ignored. ``StateSnapshot()``
    is the zero-value snapshot.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    temperature_state: StateInt = 0
    quality_state: StateInt = 0

    @model_validator(mode="before")
    @classmethod
    def _flatten_tree(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        if not any(node in values for node in _NODE_FIELDS):
            return values

        flattened: dict[str, Any] = {k: v for k, v in values.items() if k not in _NODE_FIELDS}
        for node, field_name in _NODE_FIELDS.items():
            child = values.get(node)
            if child is None:
                continue
            if not isinstance(child, dict):
                raise ValueError(f"{node} must be an object with a 'state' key, got {type(child).__name__}")
            state = child.get("state")
            if state is not None:
                flattened[field_name] = state
        return flattened
