"""Tests for settings helpers."""

import pytest

from casa.config import Settings


def _settings(**overrides) -> Settings:
    base = {
        "whatsapp_phone_number_id": "",
        "whatsapp_access_token": "",
        "razorpay_key_id": "",
        "razorpay_key_secret": "",
        "stripe_secret_key": "",
        "sentry_dsn": "",
        "analytics_id": "",
        "jwt_secret_key": "test-secret",
    }
    base.update(overrides)
    return Settings(_env_file=None, **base)


def test_missing_settings_lists_unconfigured_integrations():
    missing = _settings().missing_settings()
    assert missing == [
        "WHATSAPP_ACCESS_TOKEN",
        "RAZORPAY_KEY_ID",
        "STRIPE_SECRET_KEY",
        "SENTRY_DSN",
        "ANALYTICS_ID",
    ]


def test_razorpay_needs_both_keys():
    partial = _settings(razorpay_key_id="rzp_test_123")
    assert partial.payment_gateway_status() == {"razorpay": False, "stripe": False}

    full = _settings(razorpay_key_id="rzp_test_123", razorpay_key_secret="secret", stripe_secret_key="sk_test_1")
    assert full.payment_gateway_status() == {"razorpay": True, "stripe": True}
    assert "RAZORPAY_KEY_ID" not in full.missing_settings()


def test_plain_postgres_url_gets_async_driver():
    s = _settings(database_url="postgresql://u:p@db:5432/casa")
    assert s.async_database_url == "postgresql+asyncpg://u:p@db:5432/casa"


def test_default_jwt_secret_rejected_in_production():
    with pytest.raises(ValueError):
        Settings(_env_file=None, environment="production", jwt_secret_key="change-me-in-production")


def test_frontend_url_added_to_cors():
    s = _settings(frontend_url="https://infiniticasa.in")
    assert "https://infiniticasa.in" in s.cors_origins
