from __future__ import annotations

from functools import lru_cache

from fastapi import HTTPException

from healthdatalab.application.use_cases.count_seats import CountSeatsUseCase
from healthdatalab.application.use_cases.create_checkout_session import CreateCheckoutSessionUseCase
from healthdatalab.application.use_cases.process_stripe_webhook import ProcessStripeWebhookUseCase
from healthdatalab.application.use_cases.send_contact_message import SendContactMessageUseCase
from healthdatalab.domain.entities.email import EmailAddress
from healthdatalab.infrastructure.clients.exchange_rates import (
    ExchangeRateCache,
    FrankfurterRatesClient,
)
from healthdatalab.infrastructure.clients.smtp_email_client import SmtpEmailClient
from healthdatalab.infrastructure.clients.stripe_client import StripeClient
from healthdatalab.shared.config import get_settings


@lru_cache(maxsize=1)
def _get_stripe_client() -> StripeClient:
    settings = get_settings()
    if not settings.stripe_secret_key:
        raise HTTPException(status_code=500, detail="STRIPE_SECRET_KEY is required.")
    return StripeClient(
        secret_key=settings.stripe_secret_key,
        webhook_secret=settings.stripe_webhook_secret or None,
    )


@lru_cache(maxsize=1)
def _get_exchange_rate_cache() -> ExchangeRateCache:
    settings = get_settings()
    return ExchangeRateCache(
        rates_client=FrankfurterRatesClient(
            api_base=settings.exchange_rate_api_base,
            timeout_seconds=settings.exchange_rate_timeout_seconds,
        ),
        ttl_seconds=settings.exchange_rate_ttl_seconds,
    )


@lru_cache(maxsize=1)
def _get_email_client() -> SmtpEmailClient:
    settings = get_settings()
    return SmtpEmailClient(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_username,
        password=settings.smtp_password,
        timeout_seconds=settings.smtp_timeout_seconds,
    )


def _mail_sender() -> EmailAddress:
    settings = get_settings()
    return EmailAddress(address=settings.mail_from_address, name=settings.mail_from_name)


def get_create_checkout_session_use_case() -> CreateCheckoutSessionUseCase:
    return CreateCheckoutSessionUseCase(
        stripe_port=_get_stripe_client(),
        exchange_rate_port=_get_exchange_rate_cache(),
    )


def get_process_stripe_webhook_use_case() -> ProcessStripeWebhookUseCase:
    return ProcessStripeWebhookUseCase(
        stripe_port=_get_stripe_client(),
        email_port=_get_email_client(),
        sender=_mail_sender(),
    )


def get_count_seats_use_case() -> CountSeatsUseCase:
    settings = get_settings()
    return CountSeatsUseCase(
        stripe_port=_get_stripe_client(),
        seat_price_ids=settings.seat_price_ids,
        total_seats=settings.seat_total,
    )


def get_send_contact_message_use_case() -> SendContactMessageUseCase:
    settings = get_settings()
    return SendContactMessageUseCase(
        email_port=_get_email_client(),
        sender=_mail_sender(),
        inbox=EmailAddress(address=settings.contact_inbox_address, name=settings.mail_from_name),
    )
