import pytest
from pydantic import ValidationError

from boiler_leads.settings import Settings


def test_blank_webhook_url_disables_notifier(monkeypatch):
    monkeypatch.setenv("WEBHOOK_URL", "   ")

    assert Settings().webhook_url is None


def test_lead_webhook_url_alias(monkeypatch):
    monkeypatch.delenv("WEBHOOK_URL", raising=False)
    monkeypatch.setenv("LEAD_WEBHOOK_URL", "https://hooks.test/lead")

    assert Settings().webhook_url == "https://hooks.test/lead"


def test_cors_origins_accept_csv_and_json(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")
    assert Settings().cors_origins == ["https://a.example", "https://b.example"]

    monkeypatch.setenv("CORS_ORIGINS", '["https://c.example"]')
    assert Settings().cors_origins == ["https://c.example"]


def test_prod_requires_metrics_token(monkeypatch):
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("METRICS_ENABLED", "true")
    monkeypatch.delenv("METRICS_TOKEN", raising=False)

    with pytest.raises(ValidationError):
        Settings()


def test_invalid_promotion_month_is_rejected(monkeypatch):
    monkeypatch.setenv("PROMOTION_DEADLINE_MONTH", "13")

    with pytest.raises(ValidationError):
        Settings()
