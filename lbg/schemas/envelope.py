"""
schemas/envelope.py
-------------------

Pydantic model of the JSON envelope wrapping every response of the
service::

    {"code": "0", "message": "...", "error": "...", "data": ...}

``code`` is ``"0"`` or ``"0000"`` on success.  On failure the reason is
carried by ``message`` and, as a fallback, by ``error``.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, field_validator

SUCCESS_CODES = frozenset({"0", "0000"})


class Envelope(BaseModel):
    code: str
    message: Optional[str] = None
    error: Optional[str] = None
    data: Any = None

    @field_validator("code", mode="before")
    @classmethod
    def _code_as_text(cls, value: Any) -> Any:
        # integer codes are compared by their decimal text
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("message", "error", mode="before")
    @classmethod
    def _text_only(cls, value: Any) -> Any:
        return value if isinstance(value, str) else None

    @property
    def ok(self) -> bool:
        return self.code in SUCCESS_CODES

    def reason(self) -> str:
        """Human readable failure reason of a non-success envelope."""
        if self.message:
            return self.message
        if self.error:
            return self.error
        return f"non zero response code {self.code}"
