"""Configuration helpers for environment variables."""

from __future__ import annotations

import os
import logging

from dotenv import load_dotenv


logger = logging.getLogger(__name__)


DEFAULT_SEED_DATA_URL = "https://s3.amazonaws.com/roxiler.com/product_transaction.json"
_DEFAULT_SEED_FETCH_TIMEOUT_SECONDS = 30.0


def _should_load_dotenv() -> bool:
    """Return whether local dotenv loading should run."""
    app_env = os.getenv("APP_ENV", "dev").strip().lower()
    return app_env in {"dev", "local"}


if _should_load_dotenv():
    load_dotenv()


def get_env(name: str, default: str | None = None) -> str | None:
    """Return a raw environment value or default."""
    return os.getenv(name, default)


def app_env() -> str:
    """Return the current application environment."""
    return (get_env("APP_ENV", "dev") or "dev").strip() or "dev"


def cors_allow_origins() -> list[str]:
    """Return CORS allowed origins from env with safe environment defaults."""
    raw_origins = get_env("CORS_ALLOW_ORIGINS", "") or ""
    parsed_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]

    if parsed_origins:
        return parsed_origins

    if app_env().strip().lower() in {"dev", "local"}:
        return ["http://localhost:3000", "http://127.0.0.1:3000"]

    ui_origin = (get_env("UI_ORIGIN", "") or "").strip()
    if ui_origin:
        return [ui_origin]

    logger.warning(
        "cors_allow_origins_empty_in_prod app_env=%s; define CORS_ALLOW_ORIGINS or UI_ORIGIN",
        app_env(),
    )

    return []


def seed_data_url() -> str:
    """Return the upstream product transaction feed URL."""
    return (get_env("SEED_DATA_URL", "") or "").strip() or DEFAULT_SEED_DATA_URL


def seed_fetch_timeout_seconds() -> float:
    """Return the socket timeout used when fetching the seed feed."""
    raw_value = (get_env("SEED_FETCH_TIMEOUT_SECONDS", "") or "").strip()
    if not raw_value:
        return _DEFAULT_SEED_FETCH_TIMEOUT_SECONDS

    try:
        timeout = float(raw_value)
    except ValueError:
        logger.warning("seed_fetch_timeout_invalid value=%s", raw_value)
        return _DEFAULT_SEED_FETCH_TIMEOUT_SECONDS

    if timeout <= 0:
        logger.warning("seed_fetch_timeout_invalid value=%s", raw_value)
        return _DEFAULT_SEED_FETCH_TIMEOUT_SECONDS
    return timeout


def transactions_table() -> str:
    """Return the Supabase table holding product transactions."""
    return (get_env("TRANSACTIONS_TABLE", "transactions") or "transactions").strip() or "transactions"


def supabase_url() -> str | None:
    """Return Supabase URL when configured."""
    return get_env("SUPABASE_URL")


def supabase_service_role_key() -> str | None:
    """Return Supabase service role key when configured."""
    return get_env("SUPABASE_SERVICE_ROLE_KEY")
