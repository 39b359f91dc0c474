from __future__ import annotations

import pytest

from app.core.config import load_settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("APP_ENV", "LOG_LEVEL", "LOG_JSON", "PORT", "TOKEN_TTL_SEC"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("ID_TOKEN_ISSUER", raising=False)

    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.is_dev
    assert settings.log_level == "info"
    assert settings.log_json is False
    assert settings.port == 8085
    assert settings.token_ttl_sec == 3600
    assert settings.id_token_issuer == "esia-mock"


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("LOG_JSON", "true")
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("TOKEN_TTL_SEC", "60")

    settings = load_settings()
    assert settings.is_prod
    assert settings.log_json is True
    assert settings.port == 9000
    assert settings.token_ttl_sec == 60


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("APP_ENV", "staging"),
        ("LOG_LEVEL", "trace"),
        ("PORT", "eighty"),
        ("TOKEN_TTL_SEC", "0"),
    ],
)
def test_invalid_values_rejected(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        load_settings()
