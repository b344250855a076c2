"""Remote store client for the Firebase Realtime Database REST API.

The store is a JSON tree shared with the physical device. Every path
read or written by this package holds a single integer; the device writes
sensor paths, this package writes actuator paths only. The REST API gives
last-write-wins semantics per path and no transactions across paths.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from pydantic import ValidationError

from pyfeeder._transport import Transport
from pyfeeder.exceptions import FeederStoreError, FeederTransportError
from pyfeeder.models.state import StateSnapshot, parse_state_int

_logger = logging.getLogger(__name__)


class RemoteStore(Protocol):
    """Typed access to named integer paths in the shared store."""

    async def get_int(self, path: str) -> int:
        ...

    async def set_int(self, path: str, value: int) -> None:
        ...

    async def fetch_snapshot(self) -> StateSnapshot:
        ...


def _coerce_int(path: str, value: Any) -> int:
    try:
        return parse_state_int(value)
    except ValueError as exc:
        raise FeederStoreError(f"{path} {exc}", path=path) from exc


class FirebaseStore:
    """`RemoteStore` backed by the Realtime Database REST endpoints.

    ``GET {database_url}/{path}.json`` reads a node, ``PUT`` with a JSON
    body replaces it. When *auth* is set it is passed as the ``auth`` query
    parameter (database secret or ID token).
    """

    def __init__(self, transport: Transport, database_url: str, *, auth: str | None = None) -> None:
        self._transport = transport
        self._database_url = database_url.rstrip("/")
        self._auth = auth

    def _url(self, path: str) -> str:
        node = path.strip("/")
        return f"{self._database_url}/{node}.json" if node else f"{self._database_url}/.json"

    def _params(self) -> dict[str, str]:
        return {"auth": self._auth} if self._auth else {}

    async def get(self, path: str) -> Any:
        """Read the raw JSON value stored at *path*."""
        try:
            return await self._transport.request_json("GET", self._url(path), params=self._params())
        except FeederTransportError as exc:
            raise FeederStoreError(f"Failed to read {path or '/'}: {exc}", path=path) from exc

    async def get_int(self, path: str) -> int:
        return _coerce_int(path, await self.get(path))

    async def set_int(self, path: str, value: int) -> None:
        try:
            await self._transport.request_json(
                "PUT",
                self._url(path),
                params=self._params(),
                json_body=int(value),
            )
        except FeederTransportError as exc:
            raise FeederStoreError(f"Failed to write {path}: {exc}", path=path) from exc
        _logger.debug("Wrote %s=%s", path, value)

    async def fetch_snapshot(self) -> StateSnapshot:
        """Read the whole tree from the root and validate it into a snapshot."""
        root = await self.get("/")
        if root is None:
            return StateSnapshot()
        if not isinstance(root, dict):
            raise FeederStoreError(f"Store root is {type(root).__name__}, expected an object", path="/")
        try:
            return StateSnapshot.model_validate(root)
        except ValidationError as exc:
            raise FeederStoreError(f"Store root does not match the state layout: {exc}", path="/") from exc
