from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote_plus


SUPPORTED_APP_ENVS = {"DEV", "PROD"}


def _current_app_env() -> str:
    default_env = "PROD" if os.getenv("RAILWAY_ENVIRONMENT", "").strip() else "DEV"
    raw = os.getenv("APP_ENV", default_env).strip().upper()
    if not raw:
        return default_env
    if raw not in SUPPORTED_APP_ENVS:
        raise ValueError(f"Invalid APP_ENV: {raw}. Supported values: {sorted(SUPPORTED_APP_ENVS)}")
    return raw


def _get_first_set(*env_names: str) -> str:
    for env_name in env_names:
        value = os.getenv(env_name, "").strip()
        if value:
            return value
    return ""


def _normalize_database_url(raw_url: str) -> str:
    if not raw_url:
        return raw_url
    if raw_url.startswith("postgres://"):
        return raw_url.replace("postgres://", "postgresql+psycopg2://", 1)
    if raw_url.startswith("postgresql://") and "+" not in raw_url.split("://", 1)[0]:
        return raw_url.replace("postgresql://", "postgresql+psycopg2://", 1)
    return raw_url


def _with_sslmode_if_needed(db_url: str) -> str:
    if not db_url.startswith("postgresql") or "sslmode=" in db_url:
        return db_url
    lowered = db_url.lower()
    if "localhost" in lowered or "127.0.0.1" in lowered:
        return db_url
    sep = "&" if "?" in db_url else "?"
    return f"{db_url}{sep}sslmode=require"


def _build_database_url() -> str:
    explicit = _get_first_set("DATABASE_URL", "DATABASE_PUBLIC_URL")
    if explicit:
        return _with_sslmode_if_needed(_normalize_database_url(explicit))

    host = _get_first_set("PGHOST")
    user = _get_first_set("PGUSER")
    database = _get_first_set("PGDATABASE")
    if host and user and database:
        port = _get_first_set("PGPORT") or "5432"
        pwd = quote_plus(_get_first_set("PGPASSWORD"))
        return _with_sslmode_if_needed(f"postgresql+psycopg2://{user}:{pwd}@{host}:{port}/{database}")

    # Local dev fallback when no Postgres is configured.
    sqlite_file = Path(os.getenv("SQLITE_DB_PATH", "./portfolio.db")).as_posix()
    if sqlite_file.startswith("/"):
        return f"sqlite:///{sqlite_file}"
    return f"sqlite:///./{sqlite_file.lstrip('./')}"


@dataclass(frozen=True)
class Settings:
    app_env: str = _current_app_env()
    app_name: str = os.getenv("APP_NAME", "investment_portfolio_tracker")
    app_debug: bool = os.getenv("APP_DEBUG", "false").lower() == "true"
    app_host: str = os.getenv("APP_HOST", "0.0.0.0")
    app_port: int = int(os.getenv("APP_PORT", "8000"))

    database_url: str = _build_database_url()
    db_schema: str = _get_first_set("DB_SCHEMA") or "portfolio"
    db_init_max_attempts: int = int(os.getenv("DB_INIT_MAX_ATTEMPTS", "8"))
    db_init_retry_seconds: float = float(os.getenv("DB_INIT_RETRY_SECONDS", "3"))

    crypto_quote_currency: str = os.getenv("CRYPTO_QUOTE_CURRENCY", "USD").strip().upper() or "USD"
    price_history_period: str = os.getenv("PRICE_HISTORY_PERIOD", "5d")


settings = Settings()


def get_settings() -> Settings:
    return settings
