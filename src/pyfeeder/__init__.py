"""pyfeeder - Chat-controlled feeder bot over a shared realtime database."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyfeeder")
except PackageNotFoundError:
    __version__ = "0+local"
from pyfeeder.app import create_app
from pyfeeder.config import FeederConfig
from pyfeeder.dispatcher import CommandDispatcher
from pyfeeder.exceptions import (
    FeederConfigError,
    FeederError,
    FeederMessagingError,
    FeederStoreError,
    FeederTransportError,
    InvalidSignatureError,
)
from pyfeeder.messaging import ChatTransport, LineMessagingClient, verify_signature
from pyfeeder.models import Command, StateSnapshot, WebhookEvent, WebhookPayload
from pyfeeder.monitor import ChangeMonitor, detect_transitions
from pyfeeder.service import FeederService
from pyfeeder.store import FirebaseStore, RemoteStore

__all__ = [
    "__version__",
    "ChangeMonitor",
    "ChatTransport",
    "Command",
    "CommandDispatcher",
    "FeederConfig",
    "FeederConfigError",
    "FeederError",
    "FeederMessagingError",
    "FeederService",
    "FeederStoreError",
    "FeederTransportError",
    "FirebaseStore",
    "InvalidSignatureError",
    "LineMessagingClient",
    "RemoteStore",
    "StateSnapshot",
    "WebhookEvent",
    "WebhookPayload",
    "create_app",
    "detect_transitions",
    "verify_signature",
]
