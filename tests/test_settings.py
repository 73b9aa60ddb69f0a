from __future__ import annotations

import pytest
from pydantic import ValidationError

from petotel.config.settings import Settings


def test_settings_read_prefixed_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("PETOTEL_LITEAPI_KEY", "sand_env")
    monkeypatch.setenv("PETOTEL_CURRENCY", "EUR")
    monkeypatch.setenv("PETOTEL_SESSION_DB_PATH", str(tmp_path / "sessions" / "checkout.sqlite3"))
    monkeypatch.setenv("PETOTEL_LOG_DIR", str(tmp_path / "logs"))

    settings = Settings()

    assert settings.currency == "EUR"
    assert settings.api_headers()["X-API-Key"] == "sand_env"
    settings.ensure_directories()
    assert settings.session_db_path.parent.exists()
    assert settings.log_dir.exists()


def test_missing_key_sends_empty_header(caplog, tmp_path, monkeypatch):
    monkeypatch.delenv("PETOTEL_LITEAPI_KEY", raising=False)
    settings = Settings(liteapi_key=None, log_dir=tmp_path / "logs")

    with caplog.at_level("WARNING"):
        headers = settings.api_headers()

    assert headers["X-API-Key"] == ""
    assert "PETOTEL_LITEAPI_KEY" in caplog.text


def test_confirmation_url_carries_checkout_id():
    settings = Settings(public_base_url="https://shop.example/")

    assert settings.confirmation_url("a b/c") == "https://shop.example/confirmation?checkoutId=a+b%2Fc"


@pytest.mark.parametrize("field", ["http_timeout_s", "session_ttl_s", "max_rates_per_hotel"])
def test_non_positive_values_are_rejected(field):
    with pytest.raises(ValidationError):
        Settings(**{field: 0})
