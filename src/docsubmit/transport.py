"""HTTP transport used by the document client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Protocol

import requests

from .errors import TransportError
from .session import create_session


@dataclass(frozen=True)
class TransportResponse:
    """Status code and raw body of an HTTP response."""

    status_code: int
    body: bytes
    encoding: str | None = None

    @property
    def text(self) -> str:
        try:
            return self.body.decode(self.encoding or "utf-8", errors="replace")
        except LookupError:
            # unknown charset in Content-Type
            return self.body.decode("utf-8", errors="replace")


class Transport(Protocol):
    """Anything that can send one HTTP request and return its response."""

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: bytes,
        timeout: float,
    ) -> TransportResponse:
        ...

    def close(self) -> None:
        ...


class RequestsTransport:
    """Transport backed by a shared :class:`requests.Session`."""

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        user_agent: str | None = None,
        pool_size: int = 10,
    ) -> None:
        self._owns_session = session is None
        self.session = (
            session
            if session is not None
            else create_session(user_agent=user_agent, pool_size=pool_size)
        )

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: bytes,
        timeout: float,
    ) -> TransportResponse:
        """
        Send a request and return the response without interpreting its status.

        Redirects are not followed, so a 3xx answer is returned as-is.

        Raises:
            TransportError: On connection errors, timeouts and any other
                failure raised by requests
        """
        try:
            response = self.session.request(
                method,
                url,
                headers=dict(headers),
                data=body,
                timeout=timeout,
                allow_redirects=False,
            )
        except requests.RequestException as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc
        # Bodies without a declared charset are UTF-8.
        content_type = response.headers.get("Content-Type", "")
        return TransportResponse(
            status_code=response.status_code,
            body=response.content,
            encoding=response.encoding if "charset" in content_type.lower() else None,
        )

    def close(self) -> None:
        """Close the session if this transport created it."""
        if self._owns_session:
            self.session.close()
