"""Client configuration."""

from __future__ import annotations

import math
import os
import re
from dataclasses import dataclass
from typing import Mapping
from urllib.parse import urlparse

from .errors import InvalidConfiguration
from .rate_limiter import Window
from .session import DEFAULT_USER_AGENT

# Window lengths the limit can be expressed in, in seconds.
TIME_UNITS = {
    "millisecond": 0.001,
    "second": 1.0,
    "minute": 60.0,
    "hour": 3600.0,
    "day": 86400.0,
}

_HEADER_NAME = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


def window_from_unit(unit: str) -> float:
    """Return the length in seconds of one ``unit`` (e.g. ``"minute"`` -> 60.0)."""
    key = unit.strip().lower()
    if key.endswith("s") and key[:-1] in TIME_UNITS:
        key = key[:-1]
    try:
        return TIME_UNITS[key]
    except KeyError:
        raise InvalidConfiguration(
            f"Unknown time unit {unit!r}; expected one of {', '.join(TIME_UNITS)}"
        ) from None


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable settings for a :class:`~docsubmit.client.DocumentClient`.

    Args:
        endpoint: URL documents are POSTed to
        signature_header: Header that carries the document signature
        request_limit: Maximum number of requests started per window
        window: Length of the sliding window in seconds (default: 1 second)
        request_timeout: Per-request timeout in seconds (default: 30)
        user_agent: User-Agent for the default HTTP session

    Raises:
        InvalidConfiguration: If any setting is missing or out of range
    """

    endpoint: str
    signature_header: str = "X-Signature"
    request_limit: int = 1
    window: float = 1.0
    request_timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if not self.endpoint:
            raise InvalidConfiguration("endpoint is required")
        if not isinstance(self.endpoint, str):
            raise InvalidConfiguration(f"endpoint must be a string, got {self.endpoint!r}")
        parsed = urlparse(self.endpoint)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidConfiguration(
                f"endpoint must be an absolute http(s) URL, got {self.endpoint!r}"
            )
        if not isinstance(self.signature_header, str) or not _HEADER_NAME.match(
            self.signature_header
        ):
            raise InvalidConfiguration(
                f"invalid signature header name {self.signature_header!r}"
            )
        if isinstance(self.request_timeout, bool) or not isinstance(
            self.request_timeout, (int, float)
        ):
            raise InvalidConfiguration(
                f"request_timeout must be a number of seconds, got {self.request_timeout!r}"
            )
        if not math.isfinite(self.request_timeout) or self.request_timeout <= 0:
            raise InvalidConfiguration("request_timeout must be positive")
        Window(self.request_limit, self.window)

    @property
    def rate_window(self) -> Window:
        return Window(self.request_limit, self.window)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ClientConfig":
        """
        Build a configuration from ``DOCSUBMIT_*`` environment variables.

        Recognised variables: DOCSUBMIT_ENDPOINT (required),
        DOCSUBMIT_SIGNATURE_HEADER, DOCSUBMIT_REQUEST_LIMIT,
        DOCSUBMIT_WINDOW_SECONDS and DOCSUBMIT_TIMEOUT_SECONDS.
        """
        env = os.environ if environ is None else environ
        try:
            return cls(
                endpoint=env.get("DOCSUBMIT_ENDPOINT", ""),
                signature_header=env.get("DOCSUBMIT_SIGNATURE_HEADER", "X-Signature"),
                request_limit=int(env.get("DOCSUBMIT_REQUEST_LIMIT", "1")),
                window=float(env.get("DOCSUBMIT_WINDOW_SECONDS", "1.0")),
                request_timeout=float(env.get("DOCSUBMIT_TIMEOUT_SECONDS", "30")),
            )
        except ValueError as exc:
            if isinstance(exc, InvalidConfiguration):
                raise
            raise InvalidConfiguration(f"Invalid environment configuration: {exc}") from exc
