"""Service configuration for pyfeeder."""

from __future__ import annotations

import dataclasses
import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from pyfeeder._constants import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_WEBHOOK_PATH,
    FOOD_THRESHOLD,
    LINE_API_URL,
)
from pyfeeder.exceptions import FeederConfigError

_logger = logging.getLogger(__name__)

_REQUIRED_ENV: dict[str, str] = {
    "LINE_CHANNEL_SECRET": "channel_secret",
    "LINE_CHANNEL_ACCESS_TOKEN": "channel_access_token",
    "FIREBASE_DATABASE_URL": "database_url",
}

_OPTIONAL_ENV: dict[str, str] = {
    "FIREBASE_AUTH": "database_auth",
    "LINE_API_URL": "messaging_api_url",
    "FEEDER_HOST": "host",
    "FEEDER_WEBHOOK_PATH": "webhook_path",
}

_NUMERIC_ENV: dict[str, tuple[str, type]] = {
    "FEEDER_POLL_INTERVAL": ("poll_interval", float),
    "FEEDER_REQUEST_TIMEOUT": ("request_timeout", float),
    "FEEDER_FOOD_THRESHOLD": ("food_threshold", int),
    "FEEDER_PORT": ("port", int),
}


@dataclasses.dataclass(frozen=True)
class FeederConfig:
    """Service configuration.

    Parameters
    ----------
    channel_secret : str
        LINE channel secret, used to verify webhook signatures.
    channel_access_token : str
        LINE channel access token for reply and broadcast calls.
    database_url : str
        Firebase Realtime Database root URL
        (e.g. ``"https://my-feeder-default-rtdb.firebaseio.com"``).
    database_auth : str or None
        Database secret or ID token, sent as the ``auth`` query parameter.
        ``None`` for databases with public rules.
    messaging_api_url : str
        LINE Messaging API base URL.
    poll_interval : float
        Seconds between two change-monitor ticks.
    request_timeout : float
        Total timeout in seconds for a single store or chat request.
    food_threshold : int
        Food level above which the ``feed`` command is refused.
    host : str
        Interface the webhook server binds to.
    port : int
        Port the webhook server listens on.
    webhook_path : str
        URL path receiving webhook deliveries.
    """

    channel_secret: str
    channel_access_token: str
    database_url: str
    database_auth: str | None = None
    messaging_api_url: str = LINE_API_URL
    poll_interval: float = DEFAULT_POLL_INTERVAL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    food_threshold: int = FOOD_THRESHOLD
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8080
    webhook_path: str = DEFAULT_WEBHOOK_PATH

    def __post_init__(self) -> None:
        for field_name in ("channel_secret", "channel_access_token", "database_url"):
            if not str(getattr(self, field_name) or "").strip():
                raise FeederConfigError(f"{field_name} must be non-empty")
        # Frozen dataclass; normalise through object.__setattr__.
        object.__setattr__(self, "database_url", self.database_url.strip().rstrip("/"))
        object.__setattr__(self, "messaging_api_url", self.messaging_api_url.strip().rstrip("/"))
        if self.poll_interval <= 0:
            raise FeederConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.request_timeout <= 0:
            raise FeederConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if not self.webhook_path.startswith("/"):
            raise FeederConfigError(f"webhook_path must start with '/', got {self.webhook_path!r}")

    @classmethod
    def from_env(cls, env_file: str | os.PathLike[str] | None = None, **overrides: Any) -> FeederConfig:
        """Create configuration from environment variables.

        Loads *env_file* (or ``.env`` in the working directory) first when
        present, without overriding variables already set in the process
        environment. Explicit keyword arguments override environment values.

        Raises
        ------
        FeederConfigError
            A required variable is missing or a numeric one does not parse.
        """
        dotenv_path = Path(env_file) if env_file is not None else Path(".env")
        if dotenv_path.is_file():
            load_dotenv(dotenv_path, override=False)
        else:
            _logger.warning("%s not found; falling back to process environment", dotenv_path)

        env = os.environ
        config_kwargs: dict[str, Any] = {}

        missing = [key for key, field_name in _REQUIRED_ENV.items() if not env.get(key) and field_name not in overrides]
        if missing:
            raise FeederConfigError(f"Missing required environment variables: {', '.join(missing)}")

        for env_key, field_name in {**_REQUIRED_ENV, **_OPTIONAL_ENV}.items():
            val = env.get(env_key)
            if val:
                config_kwargs[field_name] = val

        for env_key, (field_name, kind) in _NUMERIC_ENV.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = kind(val)
            except ValueError as exc:
                raise FeederConfigError(f"{env_key} must be a number, got {val!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
