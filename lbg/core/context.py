"""
core/context.py
----------------

In-memory session context of one client: the authenticated email and
the bearer token issued by ``login``.  Access goes through a re-entrant
lock so that a ``login`` running on one thread never interleaves with
the header construction of an ``execute`` running on another; readers
take a snapshot of the token once per request.
"""

from __future__ import annotations

import threading


class TokenContext:
    """Lock-guarded holder of the session's bearer token."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._token = ""
        self._email = ""

    def set(self, token: str, email: str) -> None:
        """Store the token issued for ``email``, replacing any previous one."""
        with self._lock:
            self._token = token
            self._email = email

    def get(self) -> str:
        """Return the current token, or an empty string before login."""
        with self._lock:
            return self._token

    @property
    def email(self) -> str:
        with self._lock:
            return self._email

    def clear(self) -> None:
        """Forget the token so later requests are sent unauthenticated."""
        with self._lock:
            self._token = ""
