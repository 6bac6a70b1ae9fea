"""docsubmit - Rate-limited, thread-safe client for submitting signed JSON documents."""

__version__ = "1.0.0"

from .batch import SubmissionResult, submit_many
from .client import DocumentClient
from .config import ClientConfig, window_from_unit
from .errors import (
    Cancelled,
    DocumentClientError,
    InvalidConfiguration,
    SerializationError,
    TransportError,
    UnexpectedStatus,
)
from .rate_limiter import CancelToken, SlidingWindowRateLimiter, Window
from .serialization import serialize, to_json
from .session import create_session
from .transport import RequestsTransport, Transport, TransportResponse

__all__ = [
    "Cancelled",
    "CancelToken",
    "ClientConfig",
    "DocumentClient",
    "DocumentClientError",
    "InvalidConfiguration",
    "RequestsTransport",
    "SerializationError",
    "SlidingWindowRateLimiter",
    "SubmissionResult",
    "Transport",
    "TransportError",
    "TransportResponse",
    "UnexpectedStatus",
    "Window",
    "create_session",
    "serialize",
    "submit_many",
    "to_json",
    "window_from_unit",
]
