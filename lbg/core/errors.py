"""
core/errors.py
--------------

Exception taxonomy raised by the ``lbg`` client.  Every error derives
from :class:`LbgError` and carries the HTTP status code of the response
that produced it (``0`` when no response arrived), mirroring the
``status_code``/``detail`` pair of an HTTP exception.
"""

from __future__ import annotations


class LbgError(Exception):
    """Base class for every error raised by the client."""

    def __init__(self, detail: str, *, status_code: int = 0) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class MissingCredentials(LbgError):
    """Login was attempted without an email or a password."""


class TransportError(LbgError):
    """The request never produced a response (DNS, connection, timeout)."""


class MalformedEnvelope(LbgError):
    """The response body is not a JSON object with a usable ``code``."""


class RemoteError(LbgError):
    """A well-formed envelope reported a non-success ``code``."""

    def __init__(self, message: str, *, code: str, status_code: int = 0) -> None:
        super().__init__(message, status_code=status_code)
        self.code = code
        self.message = message


class MalformedLoginResponse(LbgError):
    """Login succeeded at the envelope level but returned no usable token."""


__all__ = [
    "LbgError",
    "MalformedEnvelope",
    "MalformedLoginResponse",
    "MissingCredentials",
    "RemoteError",
    "TransportError",
]
