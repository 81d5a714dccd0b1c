"""
schemas/auth.py
----------------

Pydantic models for the ``/account/login`` exchange.  The request model
serialises the credentials with proper JSON escaping; the response model
validates the ``data`` payload returned inside the success envelope.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    token: str = Field(min_length=1)
