from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


DEFAULT_SEAT_PRICE_IDS = (
    "price_1T0RzZAARZOPki7ntFFvn9sT",  # Course one-time
    "price_1T0RzZAARZOPki7nqvhHqbht",  # Course installment
    "price_1T0RzZAARZOPki7nq98AvjGG",  # Signature one-time
    "price_1T0RzaAARZOPki7ntdAHvkXt",  # Signature installment
)


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _env_first(*names: str, default: str = "") -> str:
    for name in names:
        value = _env(name)
        if value:
            return value
    return default


def _csv(name: str, default: tuple[str, ...] = ()) -> tuple[str, ...]:
    value = _env(name)
    if not value:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    stripe_secret_key: str
    stripe_webhook_secret: str
    exchange_rate_api_base: str
    exchange_rate_timeout_seconds: float
    exchange_rate_ttl_seconds: float
    smtp_host: str
    smtp_port: int
    smtp_username: str
    smtp_password: str
    smtp_timeout_seconds: float
    mail_from_address: str
    mail_from_name: str
    contact_inbox_address: str
    seat_total: int
    seat_price_ids: tuple[str, ...]
    geo_country_header: str
    site_dir: str
    cors_allow_origins: tuple[str, ...]
    log_level: str


def get_settings() -> Settings:
    return Settings(
        stripe_secret_key=_env_first("STRIPE_SECRET_KEY", "STRIPE_SK"),
        stripe_webhook_secret=_env("STRIPE_WEBHOOK_SECRET", ""),
        exchange_rate_api_base=_env("EXCHANGE_RATE_API_BASE", "https://api.frankfurter.app"),
        exchange_rate_timeout_seconds=float(_env("EXCHANGE_RATE_TIMEOUT_SECONDS", "10")),
        exchange_rate_ttl_seconds=float(_env("EXCHANGE_RATE_TTL_SECONDS", "3600")),
        smtp_host=_env("SMTP_HOST", "smtp-relay.brevo.com"),
        smtp_port=int(_env("SMTP_PORT", "587")),
        smtp_username=_env_first("SMTP_USERNAME", "BREVO_SMTP_LOGIN"),
        smtp_password=_env_first("SMTP_PASSWORD", "BREVO_SMTP_KEY"),
        smtp_timeout_seconds=float(_env("SMTP_TIMEOUT_SECONDS", "10")),
        mail_from_address=_env("MAIL_FROM_ADDRESS", "office@healthdatalab.com"),
        mail_from_name=_env("MAIL_FROM_NAME", "HealthDataLab"),
        contact_inbox_address=_env("CONTACT_INBOX_ADDRESS", "office@healthdatalab.com"),
        seat_total=int(_env("SEAT_TOTAL", "25")),
        seat_price_ids=_csv("SEAT_PRICE_IDS", DEFAULT_SEAT_PRICE_IDS),
        geo_country_header=_env("GEO_COUNTRY_HEADER", "x-country"),
        site_dir=_env("SITE_DIR", ""),
        cors_allow_origins=_csv("CORS_ALLOW_ORIGINS", ("*",)),
        log_level=_env("LOG_LEVEL", "INFO").upper(),
    )
