"""Tests for shared configuration helpers."""

from shared import config


def test_cors_allow_origins_defaults_in_dev(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)

    assert config.cors_allow_origins() == ["http://localhost:3000", "http://127.0.0.1:3000"]


def test_cors_allow_origins_parses_comma_separated_list(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.com, https://b.com")

    assert config.cors_allow_origins() == ["https://a.com", "https://b.com"]


def test_cors_allow_origins_uses_ui_origin_in_prod(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
    monkeypatch.setenv("UI_ORIGIN", "https://dashboard.example.com")

    assert config.cors_allow_origins() == ["https://dashboard.example.com"]


def test_cors_allow_origins_warns_and_defaults_to_empty_in_prod(monkeypatch, caplog) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
    monkeypatch.delenv("UI_ORIGIN", raising=False)

    assert config.cors_allow_origins() == []
    assert "cors_allow_origins_empty_in_prod" in caplog.text


def test_seed_data_url_defaults_to_product_feed(monkeypatch) -> None:
    monkeypatch.delenv("SEED_DATA_URL", raising=False)

    assert config.seed_data_url() == config.DEFAULT_SEED_DATA_URL


def test_seed_data_url_uses_env_override(monkeypatch) -> None:
    monkeypatch.setenv("SEED_DATA_URL", " https://feed.example/products.json ")

    assert config.seed_data_url() == "https://feed.example/products.json"


def test_seed_fetch_timeout_parses_env(monkeypatch) -> None:
    monkeypatch.setenv("SEED_FETCH_TIMEOUT_SECONDS", "12.5")

    assert config.seed_fetch_timeout_seconds() == 12.5


def test_seed_fetch_timeout_falls_back_on_invalid_values(monkeypatch, caplog) -> None:
    monkeypatch.setenv("SEED_FETCH_TIMEOUT_SECONDS", "soon")
    assert config.seed_fetch_timeout_seconds() == 30.0

    monkeypatch.setenv("SEED_FETCH_TIMEOUT_SECONDS", "-1")
    assert config.seed_fetch_timeout_seconds() == 30.0
    assert "seed_fetch_timeout_invalid" in caplog.text


def test_transactions_table_defaults(monkeypatch) -> None:
    monkeypatch.delenv("TRANSACTIONS_TABLE", raising=False)
    assert config.transactions_table() == "transactions"

    monkeypatch.setenv("TRANSACTIONS_TABLE", "product_sales")
    assert config.transactions_table() == "product_sales"
