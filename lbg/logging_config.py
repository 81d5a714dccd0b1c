"""
logging_config.py
------------------

Shared logging configuration and helpers for structured logging in the
``lbg`` client.  Messages are serialised as JSON so that they can be
parsed downstream by whatever log pipeline the host application uses.

The library never configures the root logger on import; it only
installs a ``NullHandler`` on its own ``lbg`` logger.  Applications
that want the client's log lines on stdout can call
:func:`configure_logging` once at start-up.

The ``log_call`` decorator records entry and exit of a function at the
DEBUG level without leaking tokens or passwords, and
:func:`log_http_request` records one outbound HTTP trial.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from functools import wraps
from typing import Any, Callable, Dict, Mapping

from pydantic import SecretStr

# Expose a module level logger.  Code elsewhere imports this instead of
# instantiating its own Logger instances.
logger = logging.getLogger("lbg")
logger.addHandler(logging.NullHandler())

# Header names that must never appear in log output
SENSITIVE_HEADERS = {"authorization", "cookie"}

# Argument names whose values are dropped from log_call output
SENSITIVE_KEY = re.compile("token|password|secret", re.IGNORECASE)


def configure_logging(level: int = logging.INFO) -> None:
    """Send ``lbg`` log records to stdout.

    Records are formatted with a timestamp, the log level and the raw
    message (itself a JSON string).  Calling this more than once does
    not add duplicate handlers.
    """
    if not any(getattr(h, "_lbg_stdout", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
        handler._lbg_stdout = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.setLevel(level)


def _sanitize(obj: Any) -> Any:
    """Make a logged argument or return value safe and JSON friendly.

    Keys naming a token, password or secret are dropped at any depth and
    ``SecretStr`` values are masked.  Anything that is not plain JSON data
    is logged by its ``repr``.
    """
    if isinstance(obj, Mapping):
        return {str(k): _sanitize(v) for k, v in obj.items() if not SENSITIVE_KEY.search(str(k))}
    if isinstance(obj, (list, tuple)):
        return [_sanitize(i) for i in obj]
    if isinstance(obj, SecretStr):
        return str(obj)
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    return repr(obj)


def log_call(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to log entry and exit of functions at DEBUG level.

    The messages include the function name and a sanitised snapshot of
    the keyword arguments and the return value.  Positional arguments
    are only counted, since the first one is usually ``self``.

    Examples
    --------

    >>> @log_call
    ... def add(a, b):
    ...     return a + b
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        logger.debug(json.dumps({
            "event": "call_start",
            "function": func.__qualname__,
            "nargs": len(args),
            "kwargs": _sanitize(kwargs),
        }))
        result = func(*args, **kwargs)
        logger.debug(json.dumps({
            "event": "call_end",
            "function": func.__qualname__,
            "result": _sanitize(result),
        }))
        return result

    return wrapper


def log_http_request(method: str, url: str, *, headers: Mapping[str, Any] | None = None,
                     attempt: int | None = None, status: int | None = None,
                     duration_ms: float | None = None, error: str | None = None) -> None:
    """Log one outbound HTTP trial at DEBUG level.

    Sensitive headers are removed so that bearer tokens never reach the
    logs.  Request bodies are deliberately not logged since the login
    body carries the password.

    Parameters
    ----------
    method : str
        The HTTP method (GET, POST, etc.)
    url : str
        The URL being requested.
    headers : mapping, optional
        Request headers.  Sensitive keys are removed.
    attempt : int, optional
        One-based trial number within the retry loop.
    status : int, optional
        Response status code, when a response arrived.
    duration_ms : float, optional
        Time taken in milliseconds.
    error : str, optional
        Description of the trial's failure, if any.
    """
    data: Dict[str, Any] = {
        "event": "http_request",
        "method": method,
        "url": url,
    }
    if headers is not None:
        data["headers"] = {k: v for k, v in headers.items() if k.lower() not in SENSITIVE_HEADERS}
    if attempt is not None:
        data["attempt"] = attempt
    if status is not None:
        data["status"] = status
    if duration_ms is not None:
        data["duration_ms"] = round(duration_ms, 2)
    if error is not None:
        data["error"] = error
    logger.debug(json.dumps(data))
