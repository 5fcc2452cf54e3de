from __future__ import annotations

import json
import logging
from typing import Any

import stripe

from healthdatalab.application.dto.billing import (
    StripeCheckoutCompletedEventData,
    StripeInvoicePaidEventData,
    StripeWebhookEvent,
)
from healthdatalab.application.ports.stripe_port import StripePort
from healthdatalab.domain.entities.checkout import CheckoutSessionParams
from healthdatalab.domain.entities.seats import CheckoutSessionPage
from healthdatalab.domain.entities.subscription import (
    Invoice,
    Subscription,
    is_subscription_cancelled,
)
from healthdatalab.domain.exceptions import ProviderError, SignatureError
from healthdatalab.domain.services.checkout_session import TRIAL_MISSING_PAYMENT_METHOD_BEHAVIOR


logger = logging.getLogger(__name__)

LINE_ITEMS_PAGE_SIZE = 100
INVOICES_PAGE_SIZE = 100


def _provider_message(exc: Exception, fallback: str) -> str:
    message = getattr(exc, "user_message", None) or str(exc)
    return message or fallback


def _as_dict(value: Any) -> dict:
    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(value)


def _object_id(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        object_id = value.get("id")
    else:
        object_id = getattr(value, "id", None)
    return str(object_id) if object_id else None


def _str_dict(value: Any) -> dict[str, str]:
    return {str(key): str(item) for key, item in _as_dict(value).items() if item is not None}


def build_checkout_payload(params: CheckoutSessionParams) -> dict:
    line_item = params.line_item
    if line_item.is_ad_hoc:
        price_data: dict = {
            "currency": line_item.currency,
            "product": line_item.product_id,
            "unit_amount": line_item.unit_amount,
        }
        if line_item.recurring_interval:
            price_data["recurring"] = {"interval": line_item.recurring_interval}
        stripe_line_item: dict = {"price_data": price_data, "quantity": 1}
    else:
        stripe_line_item = {"price": line_item.price_id, "quantity": 1}

    payload: dict = {
        "payment_method_types": ["card"],
        "line_items": [stripe_line_item],
        "mode": params.mode,
        "success_url": params.success_url,
        "cancel_url": params.cancel_url,
        "automatic_tax": {"enabled": True},
        "allow_promotion_codes": True,
    }
    if params.session_metadata:
        payload["metadata"] = dict(params.session_metadata)

    subscription_data: dict = {}
    if params.trial_days:
        subscription_data["trial_period_days"] = params.trial_days
        subscription_data["trial_settings"] = {
            "end_behavior": {"missing_payment_method": TRIAL_MISSING_PAYMENT_METHOD_BEHAVIOR},
        }
    if params.subscription_description:
        subscription_data["description"] = params.subscription_description
    if params.subscription_metadata:
        subscription_data["metadata"] = dict(params.subscription_metadata)
    if subscription_data:
        payload["subscription_data"] = subscription_data

    if params.submit_message:
        payload["custom_text"] = {"submit": {"message": params.submit_message}}
    return payload


def parse_webhook_event(event: dict) -> StripeWebhookEvent:
    event_type = str(event.get("type", ""))
    event_id = event.get("id")
    data = event.get("data") or {}
    data_object = (data.get("object") or {}) if isinstance(data, dict) else None
    if not isinstance(data_object, dict):
        raise SignatureError("Webhook Error: invalid payload.")

    if event_type == "invoice.paid":
        subscription = data_object.get("subscription")
        if subscription is None:
            # newer API versions nest the subscription under the invoice parent
            parent = data_object.get("parent") or {}
            subscription = (parent.get("subscription_details") or {}).get("subscription")
        return StripeWebhookEvent(
            event_id=event_id,
            event_type=event_type,
            invoice_paid=StripeInvoicePaidEventData(
                invoice_id=str(data_object.get("id")),
                subscription_id=_object_id(subscription),
            ),
        )

    if event_type == "checkout.session.completed":
        details = data_object.get("customer_details") or {}
        amount_total = data_object.get("amount_total")
        return StripeWebhookEvent(
            event_id=event_id,
            event_type=event_type,
            checkout_completed=StripeCheckoutCompletedEventData(
                session_id=str(data_object.get("id")),
                customer_email=details.get("email") or data_object.get("customer_email"),
                customer_name=details.get("name"),
                amount_total=int(amount_total) if amount_total is not None else None,
                currency=data_object.get("currency"),
                metadata=_str_dict(data_object.get("metadata")),
            ),
        )

    return StripeWebhookEvent(event_id=event_id, event_type=event_type)


class StripeClient(StripePort):
    def __init__(self, *, secret_key: str, webhook_secret: str | None):
        stripe.api_key = secret_key
        self._webhook_secret = webhook_secret

    def get_price_product_id(self, *, price_id: str) -> str:
        try:
            price = stripe.Price.retrieve(price_id)
        except stripe.StripeError as exc:
            raise ProviderError(_provider_message(exc, "Failed to retrieve Stripe price.")) from exc

        product_id = _object_id(getattr(price, "product", None))
        if not product_id:
            raise ProviderError(f"Stripe price {price_id} has no product.")
        return product_id

    def create_checkout_session(self, *, params: CheckoutSessionParams) -> str:
        payload = build_checkout_payload(params)
        try:
            session = stripe.checkout.Session.create(**payload)
        except stripe.StripeError as exc:
            raise ProviderError(_provider_message(exc, "Failed to create Stripe checkout session.")) from exc

        session_id = getattr(session, "id", None)
        if not session_id:
            raise ProviderError("Stripe checkout session id is missing.")
        return str(session_id)

    def list_completed_sessions(
        self,
        *,
        limit: int,
        starting_after: str | None,
    ) -> CheckoutSessionPage:
        request: dict = {"status": "complete", "limit": limit}
        if starting_after:
            request["starting_after"] = starting_after
        try:
            page = stripe.checkout.Session.list(**request)
        except stripe.StripeError as exc:
            raise ProviderError(_provider_message(exc, "Failed to list Stripe checkout sessions.")) from exc

        return CheckoutSessionPage(
            session_ids=[str(session.id) for session in page.data],
            has_more=bool(page.has_more),
        )

    def list_line_item_price_ids(self, *, session_id: str) -> list[str]:
        price_ids: list[str] = []
        try:
            items = stripe.checkout.Session.list_line_items(session_id, limit=LINE_ITEMS_PAGE_SIZE)
            for item in items.auto_paging_iter():
                price_id = _object_id(getattr(item, "price", None))
                if price_id:
                    price_ids.append(price_id)
        except stripe.StripeError as exc:
            raise ProviderError(_provider_message(exc, "Failed to list Stripe line items.")) from exc
        return price_ids

    def retrieve_subscription(self, *, subscription_id: str) -> Subscription:
        try:
            subscription = stripe.Subscription.retrieve(subscription_id)
        except stripe.StripeError as exc:
            raise ProviderError(_provider_message(exc, "Failed to retrieve Stripe subscription.")) from exc

        return Subscription(
            id=str(subscription.id),
            status=str(getattr(subscription, "status", "")),
            metadata=_str_dict(getattr(subscription, "metadata", None)),
        )

    def cancel_subscription(self, *, subscription_id: str) -> bool:
        try:
            stripe.Subscription.cancel(subscription_id)
        except stripe.InvalidRequestError as exc:
            current = self.retrieve_subscription(subscription_id=subscription_id)
            if is_subscription_cancelled(current.status):
                return False
            raise ProviderError(_provider_message(exc, "Failed to cancel Stripe subscription.")) from exc
        except stripe.StripeError as exc:
            raise ProviderError(_provider_message(exc, "Failed to cancel Stripe subscription.")) from exc
        return True

    def list_paid_invoices(self, *, subscription_id: str) -> list[Invoice]:
        invoices: list[Invoice] = []
        try:
            page = stripe.Invoice.list(
                subscription=subscription_id,
                status="paid",
                limit=INVOICES_PAGE_SIZE,
            )
            for invoice in page.auto_paging_iter():
                invoices.append(
                    Invoice(
                        id=str(invoice.id),
                        amount_paid=int(getattr(invoice, "amount_paid", 0) or 0),
                    )
                )
        except stripe.StripeError as exc:
            raise ProviderError(_provider_message(exc, "Failed to list Stripe invoices.")) from exc
        return invoices

    def verify_webhook(self, *, signature: str | None, payload: bytes) -> StripeWebhookEvent:
        if self._webhook_secret:
            if not signature:
                raise SignatureError("Missing Stripe-Signature header.")
            try:
                stripe.Webhook.construct_event(
                    payload=payload,
                    sig_header=signature,
                    secret=self._webhook_secret,
                )
            except stripe.SignatureVerificationError as exc:
                logger.warning("stripe_client: webhook signature verification failed detail=%s", exc)
                raise SignatureError(f"Webhook Error: {exc}") from exc
            except ValueError as exc:
                raise SignatureError("Webhook Error: invalid payload.") from exc

        try:
            event = json.loads(payload)
        except ValueError as exc:
            raise SignatureError("Webhook Error: invalid payload.") from exc
        if not isinstance(event, dict):
            raise SignatureError("Webhook Error: invalid payload.")
        return parse_webhook_event(event)
