"""Custom exception hierarchy for pyfeeder."""

from __future__ import annotations


class FeederError(Exception):
    """Base exception for all pyfeeder errors."""


class FeederConfigError(FeederError):
    """Invalid or missing configuration."""


class FeederTransportError(FeederError):
    """HTTP-level failure (network, timeout, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class FeederStoreError(FeederError):
    """Remote store read or write failed, or returned an unusable value."""

    def __init__(self, message: str, *, path: str = "") -> None:
        self.path = path
        super().__init__(message)


class FeederMessagingError(FeederError):
    """Reply or broadcast through the chat transport failed."""


class InvalidSignatureError(FeederError):
    """Webhook request signature did not match the channel secret."""
