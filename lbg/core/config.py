"""
core/config.py
----------------

Client configuration.

Defines strongly-typed settings loaded from the environment using
``pydantic-settings``.  The settings hold the credentials, the service
endpoint and the retry policy of an :class:`~lbg.clients.http_client.LbgClient`.
A ``Settings`` instance is passed explicitly to the client constructor;
values not supplied there fall back to ``LBG_*`` environment variables
and then to the defaults below.
"""

from __future__ import annotations

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENDPOINT = "https://bohrium.dp.tech"

# Pinned client identification sent with every request
CLIENT_HEADER = "bohr-client"
CLIENT_VERSION = "utility:1.2.18"


class Settings(BaseSettings):
    """Client settings loaded from keyword arguments or the environment.

    Environment variables are prefixed with ``LBG_``.  For example, to
    allow three trials per request set ``LBG_RETRY=3``.

    ``retry`` is the number of trials, not the number of re-tries: the
    default of ``0`` makes :meth:`LbgClient.execute` perform no request
    at all.  Set it to at least ``1`` to reach the network.
    """

    # Credentials
    email: str = Field("", description="Account email used by login().")
    password: SecretStr = Field(SecretStr(""), description="Account password used by login().")

    # Service
    endpoint: str = Field(DEFAULT_ENDPOINT, description="Base URL of the service.")

    # HTTP client settings
    http_timeout: float = Field(10.0, gt=0, description="Timeout in seconds of the default transport.")
    retry: int = Field(0, ge=0, description="Number of trials per request.")
    retry_backoff_factor: float = Field(0.0, ge=0, description="Base delay of exponential backoff between trials; 0 disables sleeping.")
    retry_jitter: float = Field(0.0, ge=0, description="Upper bound of the random delay added to each backoff.")
    retry_only_transient: bool = Field(False, description="Stop retrying on remote errors that are not 5xx or 429.")

    model_config = SettingsConfigDict(env_prefix="LBG_", env_file=None, case_sensitive=False)

    @field_validator("endpoint")
    @classmethod
    def _default_endpoint(cls, value: str) -> str:
        value = value.strip()
        return value or DEFAULT_ENDPOINT
