"""
core/envelope.py
----------------

Envelope codec: turns a raw response body into the payload a caller can
decode into its own type, or into the error the service reported.

The ``data`` member is returned exactly as it appeared on the wire.  The
body is first validated with :func:`json.loads`; the raw text span of
``data`` is then located by walking the top-level object with
:meth:`json.JSONDecoder.raw_decode`, so no value is ever re-encoded and
key order inside ``data`` is preserved.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from pydantic import ValidationError

from lbg.core.errors import MalformedEnvelope, RemoteError
from lbg.schemas.envelope import Envelope

_decoder = json.JSONDecoder()
_WHITESPACE = re.compile(r"[ \t\n\r]*")


def _skip(text: str, idx: int) -> int:
    return _WHITESPACE.match(text, idx).end()


def _raw_member(text: str, name: str) -> Optional[str]:
    """Return the raw JSON text of a top-level member, or ``None``.

    ``text`` must already be known to hold a valid JSON object.  When a
    key is repeated the last occurrence wins, as with :func:`json.loads`.
    """
    idx = _skip(text, 0) + 1  # past "{"
    idx = _skip(text, idx)
    if text[idx] == "}":
        return None
    found: Optional[str] = None
    while True:
        key, idx = _decoder.raw_decode(text, idx)
        idx = _skip(text, _skip(text, idx) + 1)  # past ":"
        start = idx
        _, idx = _decoder.raw_decode(text, idx)
        if key == name:
            found = text[start:idx]
        idx = _skip(text, idx)
        if text[idx] != ",":
            return found
        idx = _skip(text, idx + 1)


def _load(body: bytes) -> tuple[str, dict[str, Any]]:
    try:
        text = body.decode("utf-8")
        document = json.loads(text)
    except (UnicodeDecodeError, ValueError) as exc:
        raise MalformedEnvelope(f"response body is not JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise MalformedEnvelope("response body is not a JSON object")
    return text, document


def _validate(document: dict[str, Any]) -> Envelope:
    try:
        return Envelope.model_validate(document)
    except ValidationError as exc:
        raise MalformedEnvelope(f"response envelope has no usable code: {exc.errors()[0]['msg']}") from exc


def parse_envelope(body: bytes) -> Envelope:
    """Validate ``body`` as an envelope without interpreting ``code``."""
    _, document = _load(body)
    return _validate(document)


def decode(body: bytes) -> bytes:
    """Unwrap a response body into the raw bytes of its ``data`` member.

    :param body: full HTTP response body, UTF-8 JSON
    :raises MalformedEnvelope: if the body is not a JSON object with a
        string or integer ``code``
    :raises RemoteError: if ``code`` is not a success sentinel
    :return: ``data`` exactly as sent, or ``b""`` when it is absent
    """
    text, document = _load(body)
    envelope = _validate(document)
    if not envelope.ok:
        raise RemoteError(envelope.reason(), code=envelope.code)
    if "data" not in document:
        return b""
    raw = _raw_member(text, "data")
    return raw.encode("utf-8") if raw is not None else b""
