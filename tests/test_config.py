"""Tests for Settings loading and defaults."""

import pytest
from pydantic import ValidationError

from lbg import DEFAULT_ENDPOINT, Settings


def test_defaults() -> None:
    settings = Settings()
    assert settings.endpoint == DEFAULT_ENDPOINT
    assert settings.retry == 0
    assert settings.retry_backoff_factor == 0.0
    assert settings.retry_only_transient is False
    assert settings.password.get_secret_value() == ""


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LBG_EMAIL", "a@b.com")
    monkeypatch.setenv("LBG_PASSWORD", "pw")
    monkeypatch.setenv("LBG_RETRY", "3")
    monkeypatch.setenv("LBG_ENDPOINT", "https://staging.example")
    settings = Settings()
    assert settings.email == "a@b.com"
    assert settings.password.get_secret_value() == "pw"
    assert settings.retry == 3
    assert settings.endpoint == "https://staging.example"


def test_keyword_arguments_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LBG_RETRY", "3")
    assert Settings(retry=1).retry == 1


@pytest.mark.parametrize("endpoint", ["", "   "])
def test_blank_endpoint_uses_default(endpoint: str) -> None:
    assert Settings(endpoint=endpoint).endpoint == DEFAULT_ENDPOINT


def test_negative_retry_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(retry=-1)


def test_password_is_masked_in_repr() -> None:
    assert "pw-secret" not in repr(Settings(password="pw-secret"))
