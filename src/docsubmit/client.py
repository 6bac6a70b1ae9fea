"""Rate-limited client for submitting documents to the API."""

from __future__ import annotations

import logging
from typing import Any, Callable

from .config import ClientConfig
from .errors import InvalidConfiguration, SerializationError, TransportError, UnexpectedStatus
from .rate_limiter import CancelToken, SlidingWindowRateLimiter
from .serialization import serialize
from .transport import RequestsTransport, Transport

logger = logging.getLogger(__name__)


class DocumentClient:
    """
    Thread-safe client that POSTs signed JSON documents to one endpoint.

    All callers sharing a client share its rate limiter: at most
    ``config.request_limit`` requests start within any ``config.window``
    seconds, and callers beyond that block until a slot frees up. A permit is
    consumed as soon as it is granted, so requests that later fail still count
    toward the limit.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Transport | None = None,
        *,
        limiter: SlidingWindowRateLimiter | None = None,
        serializer: Callable[[Any], bytes] | None = None,
    ) -> None:
        if config is None:
            raise InvalidConfiguration("config is required")
        self.config = config
        self._owns_transport = transport is None
        self.transport = (
            transport
            if transport is not None
            else RequestsTransport(user_agent=config.user_agent)
        )
        self.limiter = (
            limiter
            if limiter is not None
            else SlidingWindowRateLimiter.from_window(config.rate_window)
        )
        self._serialize = serializer or serialize

    @classmethod
    def create(
        cls, endpoint: str, *, transport: Transport | None = None, **settings: Any
    ) -> "DocumentClient":
        """Build a client from keyword settings, see :class:`ClientConfig`."""
        return cls(ClientConfig(endpoint=endpoint, **settings), transport)

    def submit(
        self, document: Any, signature: str, *, cancel: CancelToken | None = None
    ) -> str:
        """
        Submit one document and return the API's response body.

        Args:
            document: Document to send; anything :func:`~docsubmit.serialization.serialize` accepts
            signature: Signature sent in the configured signature header
            cancel: Optional token that aborts the wait for a rate-limit permit

        Returns:
            Response body of a 2xx answer

        Raises:
            ValueError: If document or signature is None
            Cancelled: If ``cancel`` fired before a permit was granted
            SerializationError: If the document cannot be encoded
            TransportError: If the request fails without a response
            UnexpectedStatus: If the response status is outside [200, 300)
        """
        if document is None:
            raise ValueError("document is required")
        if signature is None:
            raise ValueError("signature is required")

        self.limiter.acquire(cancel)

        try:
            body = self._encode(document)
            headers = {
                "Content-Type": "application/json",
                self.config.signature_header: signature,
            }
            logger.debug("POST %s (%d bytes)", self.config.endpoint, len(body))
            try:
                response = self.transport.send(
                    "POST",
                    self.config.endpoint,
                    headers,
                    body,
                    self.config.request_timeout,
                )
            except TransportError as exc:
                logger.warning("Request to %s failed: %s", self.config.endpoint, exc)
                raise
            except OSError as exc:
                logger.warning("Request to %s failed: %s", self.config.endpoint, exc)
                raise TransportError(f"POST {self.config.endpoint} failed: {exc}") from exc
        finally:
            # Waiters re-check the window now rather than at the end of their timeout.
            self.limiter.notify_waiters()

        if 200 <= response.status_code < 300:
            return response.text

        logger.warning(
            "Unexpected response from %s: %d", self.config.endpoint, response.status_code
        )
        raise UnexpectedStatus(response.status_code, response.text)

    def _encode(self, document: Any) -> bytes:
        try:
            return self._serialize(document)
        except SerializationError:
            raise
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"Could not serialize document: {exc}") from exc

    def close(self) -> None:
        """Release the HTTP transport if this client created it."""
        if self._owns_transport:
            self.transport.close()

    def __enter__(self) -> "DocumentClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
