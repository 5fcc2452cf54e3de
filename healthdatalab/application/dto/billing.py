from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class CreateCheckoutSessionInput:
    price_id: str | None
    mode: str | None
    success_url: str | None
    cancel_url: str | None
    currency: str | None = None
    base_amount_gbp: Decimal | None = None
    trial_days: int | None = None
    installments: int | None = None
    installment_amount: Decimal | None = None
    tier_name: str | None = None
    recurring_interval: str | None = None
    tier: str | None = None


@dataclass(frozen=True)
class CreateCheckoutSessionOutput:
    session_id: str


@dataclass(frozen=True)
class StripeWebhookInput:
    signature: str | None
    payload: bytes


@dataclass(frozen=True)
class StripeWebhookOutput:
    event_type: str
    handled: bool
    action: str | None = None


@dataclass(frozen=True)
class StripeInvoicePaidEventData:
    invoice_id: str
    subscription_id: str | None


@dataclass(frozen=True)
class StripeCheckoutCompletedEventData:
    session_id: str
    customer_email: str | None
    customer_name: str | None
    amount_total: int | None
    currency: str | None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class StripeWebhookEvent:
    event_id: str | None
    event_type: str
    invoice_paid: StripeInvoicePaidEventData | None = None
    checkout_completed: StripeCheckoutCompletedEventData | None = None
