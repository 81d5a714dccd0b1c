"""
lbg package
-----------

Client library for the Bohrium service.  Build a :class:`LbgClient`
from :class:`Settings`, call :meth:`LbgClient.login` once, then issue
requests with :meth:`LbgClient.execute`; every response envelope is
unwrapped into its raw ``data`` payload or raised as an
:class:`LbgError`.
"""

from lbg.clients.http_client import ExecuteResult, LbgClient, build_url
from lbg.core.config import DEFAULT_ENDPOINT, Settings
from lbg.core.envelope import decode, parse_envelope
from lbg.core.errors import (
    LbgError,
    MalformedEnvelope,
    MalformedLoginResponse,
    MissingCredentials,
    RemoteError,
    TransportError,
)
from lbg.logging_config import configure_logging

__all__ = [
    "DEFAULT_ENDPOINT",
    "ExecuteResult",
    "LbgClient",
    "LbgError",
    "MalformedEnvelope",
    "MalformedLoginResponse",
    "MissingCredentials",
    "RemoteError",
    "Settings",
    "TransportError",
    "build_url",
    "configure_logging",
    "decode",
    "parse_envelope",
]
