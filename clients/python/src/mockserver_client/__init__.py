from __future__ import annotations

__all__ = [
    "__version__",
    "AuthenticationFailure",
    "ClientClosedError",
    "ClientException",
    "ClientSettings",
    "EventBusRegistry",
    "EventType",
    "InvalidArgumentError",
    "InvalidCredentialError",
    "MockServerClient",
    "MockServerClientError",
    "SocketConnectionError",
    "ValidationFailure",
    "VerificationFailure",
    "VersionMismatchError",
    "models",
]

__version__ = "5.15.0"

from . import models  # noqa: E402
from .client import MockServerClient  # noqa: E402
from .config import ClientSettings  # noqa: E402
from .errors import (  # noqa: E402
    AuthenticationFailure,
    ClientClosedError,
    ClientException,
    InvalidArgumentError,
    InvalidCredentialError,
    MockServerClientError,
    SocketConnectionError,
    ValidationFailure,
    VerificationFailure,
    VersionMismatchError,
)
from .events import EventBusRegistry, EventType  # noqa: E402
