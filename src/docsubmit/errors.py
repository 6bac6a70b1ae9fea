"""Exceptions raised by the document client."""

from __future__ import annotations


class DocumentClientError(Exception):
    """Base class for every error raised by :mod:`docsubmit`."""


class InvalidConfiguration(DocumentClientError, ValueError):
    """Raised when a client or limiter is constructed with invalid settings."""


class Cancelled(DocumentClientError):
    """Raised when a caller stops waiting for a rate-limit permit."""


class SerializationError(DocumentClientError):
    """Raised when a document cannot be encoded as JSON."""


class TransportError(DocumentClientError):
    """Raised when the HTTP request fails before a response is received."""


class UnexpectedStatus(DocumentClientError):
    """Raised when the API answers with a status code outside ``[200, 300)``."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Unexpected response from API: {status_code} / body: {body}")
