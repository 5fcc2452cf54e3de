from __future__ import annotations

import logging

from healthdatalab.application.dto.billing import (
    CreateCheckoutSessionInput,
    CreateCheckoutSessionOutput,
)
from healthdatalab.application.ports.exchange_rate_port import ExchangeRatePort
from healthdatalab.application.ports.stripe_port import StripePort
from healthdatalab.domain.entities.checkout import CHECKOUT_MODES
from healthdatalab.domain.exceptions import InvalidCheckoutRequestError
from healthdatalab.domain.services.checkout_session import build_checkout_session_params
from healthdatalab.domain.services.currency import (
    DEFAULT_CURRENCY,
    is_supported_currency,
    normalize_currency,
)


DEFAULT_MODE = "payment"
logger = logging.getLogger(__name__)


class CreateCheckoutSessionUseCase:
    def __init__(
        self,
        *,
        stripe_port: StripePort,
        exchange_rate_port: ExchangeRatePort,
    ):
        self._stripe_port = stripe_port
        self._exchange_rate_port = exchange_rate_port

    def execute(self, command: CreateCheckoutSessionInput) -> CreateCheckoutSessionOutput:
        price_id = (command.price_id or "").strip()
        if not price_id:
            raise InvalidCheckoutRequestError("Missing priceId")

        mode = command.mode or DEFAULT_MODE
        if mode not in CHECKOUT_MODES:
            raise InvalidCheckoutRequestError(f"Unsupported mode: {mode}")

        if not command.success_url or not command.cancel_url:
            raise InvalidCheckoutRequestError("successUrl and cancelUrl are required.")

        currency = normalize_currency(command.currency)
        if not is_supported_currency(currency):
            raise InvalidCheckoutRequestError(f"Unsupported currency: {currency}")

        rate = None
        product_id = None
        base_amount = None
        if currency != DEFAULT_CURRENCY:
            if command.base_amount_gbp is None or command.base_amount_gbp <= 0:
                raise InvalidCheckoutRequestError(
                    f"baseAmountGBP is required when paying in {currency}."
                )
            base_amount = command.base_amount_gbp
            rate = self._exchange_rate_port.get_rate(currency)
            product_id = self._stripe_port.get_price_product_id(price_id=price_id)

        params = build_checkout_session_params(
            price_id=price_id,
            mode=mode,
            success_url=command.success_url,
            cancel_url=command.cancel_url,
            currency=currency,
            base_amount=base_amount,
            rate=rate,
            product_id=product_id,
            recurring_interval=command.recurring_interval,
            trial_days=command.trial_days,
            installments=command.installments,
            installment_amount=command.installment_amount,
            tier_name=command.tier_name,
            tier=command.tier,
        )
        session_id = self._stripe_port.create_checkout_session(params=params)
        logger.info(
            "create_checkout_session: created session=%s price=%s mode=%s currency=%s unit_amount=%s trial_days=%s installments=%s",
            session_id,
            price_id,
            mode,
            currency,
            params.line_item.unit_amount,
            params.trial_days,
            params.subscription_metadata.get("installments"),
        )
        return CreateCheckoutSessionOutput(session_id=session_id)
