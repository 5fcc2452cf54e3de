from __future__ import annotations

from decimal import Decimal

from healthdatalab.domain.entities.checkout import (
    CheckoutLineItem,
    CheckoutMode,
    CheckoutSessionParams,
)
from healthdatalab.domain.exceptions import InvalidCheckoutRequestError
from healthdatalab.domain.services.currency import (
    DEFAULT_CURRENCY,
    convert_display_amount,
    convert_minor_units,
    currency_symbol,
    format_money,
)


INSTALLMENTS_METADATA_KEY = "installments"
TIER_METADATA_KEY = "tier"
TIER_NAME_METADATA_KEY = "tier_name"
DEFAULT_RECURRING_INTERVAL = "month"
TRIAL_MISSING_PAYMENT_METHOD_BEHAVIOR = "cancel"
MISSING_AMOUNT_PLACEHOLDER = "—"


def build_line_item(
    *,
    price_id: str,
    mode: CheckoutMode,
    currency: str,
    base_amount: Decimal | None,
    rate: Decimal | None,
    product_id: str | None,
    recurring_interval: str | None,
) -> CheckoutLineItem:
    if currency == DEFAULT_CURRENCY:
        return CheckoutLineItem(price_id=price_id)

    if base_amount is None or rate is None or not product_id:
        raise InvalidCheckoutRequestError(
            f"A base amount in {DEFAULT_CURRENCY} is required to charge in {currency}."
        )

    interval = None
    if mode == "subscription":
        interval = recurring_interval or DEFAULT_RECURRING_INTERVAL
    return CheckoutLineItem(
        product_id=product_id,
        currency=currency.lower(),
        unit_amount=convert_minor_units(base_amount, rate),
        recurring_interval=interval,
    )


def installment_submit_message(
    *,
    installments: int,
    currency: str,
    installment_amount: Decimal | None,
    rate: Decimal | None,
) -> str:
    """Checkout page text for a payment plan.

    The per-payment amount is converted and rounded to cents first; the total is
    that rounded amount times the number of payments, so both figures agree with
    what the customer is actually charged.
    """
    if installment_amount is None:
        per_payment = f"{currency_symbol(currency)}{MISSING_AMOUNT_PLACEHOLDER}"
        total = f"{installments} payments"
    else:
        amount = convert_display_amount(installment_amount, rate if rate is not None else Decimal("1"))
        per_payment = format_money(amount, currency)
        total = format_money(amount * installments, currency)
    return (
        f"Payment plan: {installments} monthly payments of {per_payment}. "
        f"Your subscription will automatically end after {installments} months (total {total})."
    )


def build_checkout_session_params(
    *,
    price_id: str,
    mode: CheckoutMode,
    success_url: str,
    cancel_url: str,
    currency: str,
    base_amount: Decimal | None = None,
    rate: Decimal | None = None,
    product_id: str | None = None,
    recurring_interval: str | None = None,
    trial_days: int | None = None,
    installments: int | None = None,
    installment_amount: Decimal | None = None,
    tier_name: str | None = None,
    tier: str | None = None,
) -> CheckoutSessionParams:
    line_item = build_line_item(
        price_id=price_id,
        mode=mode,
        currency=currency,
        base_amount=base_amount,
        rate=rate,
        product_id=product_id,
        recurring_interval=recurring_interval,
    )
    recurring = mode == "subscription"

    session_metadata: dict[str, str] = {}
    if tier:
        session_metadata[TIER_METADATA_KEY] = tier
    if tier_name:
        session_metadata[TIER_NAME_METADATA_KEY] = tier_name

    trial = trial_days if recurring and trial_days and trial_days > 0 else None

    description = None
    subscription_metadata: dict[str, str] = {}
    submit_message = None
    if recurring and installments and installments > 0:
        label = tier_name or tier or "your plan"
        description = f"{installments} monthly payments for {label}"
        subscription_metadata[INSTALLMENTS_METADATA_KEY] = str(installments)
        subscription_metadata[TIER_METADATA_KEY] = label
        submit_message = installment_submit_message(
            installments=installments,
            currency=currency,
            installment_amount=installment_amount,
            rate=rate if currency != DEFAULT_CURRENCY else None,
        )

    return CheckoutSessionParams(
        mode=mode,
        success_url=success_url,
        cancel_url=cancel_url,
        line_item=line_item,
        trial_days=trial,
        subscription_description=description,
        subscription_metadata=subscription_metadata,
        session_metadata=session_metadata,
        submit_message=submit_message,
    )
