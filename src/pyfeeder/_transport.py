"""JSON-over-HTTP transport shared by the store and chat clients."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyfeeder._constants import USER_AGENT
from pyfeeder._redact import redact_for_log
from pyfeeder.exceptions import FeederTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the store and chat clients.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def request_json(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        json_body: Any = None,
    ) -> Any:
        ...


class HttpTransport:
    """aiohttp transport that sends/receives JSON and maps failures to `FeederTransportError`.

    A single instance is shared by every concurrent caller; it holds no
    per-request state.
    """

    def __init__(self, http_session: aiohttp.ClientSession, *, timeout: float) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def request_json(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        json_body: Any = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        An empty response body decodes to ``None``.
        """
        request_headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if headers:
            request_headers.update(headers)

        data: str | None = None
        if json_body is not None:
            data = json.dumps(json_body, separators=(",", ":"))
            request_headers["content-type"] = "application/json; charset=UTF-8"

        _logger.debug(
            "%s %s params=%s body=%s",
            method,
            url,
            redact_for_log(dict(params or {})),
            redact_for_log(json_body),
        )

        try:
            async with self._http.request(
                method,
                url,
                params=params,
                data=data,
                headers=request_headers,
                timeout=self._timeout,
            ) as resp:
                try:
                    text = await resp.text()
                except UnicodeDecodeError as exc:
                    raise FeederTransportError(
                        f"Undecodable response from {url}: {exc.reason}",
                        status_code=resp.status,
                        endpoint=url,
                    ) from exc
                if not 200 <= resp.status < 300:
                    raise FeederTransportError(
                        f"HTTP {resp.status} from {url}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=url,
                    )
        except FeederTransportError:
            raise
        except TimeoutError as exc:
            raise FeederTransportError(f"Request to {url} timed out", endpoint=url) from exc
        except aiohttp.ClientError as exc:
            raise FeederTransportError(f"Request to {url} failed: {exc}", endpoint=url) from exc

        if not text.strip():
            return None

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise FeederTransportError(
                f"Invalid JSON from {url}: {text[:200]}",
                status_code=resp.status,
                endpoint=url,
            ) from exc
