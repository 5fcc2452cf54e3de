from __future__ import annotations

import json
from types import SimpleNamespace

import pytest
import stripe

from healthdatalab.domain.entities.checkout import CheckoutLineItem, CheckoutSessionParams
from healthdatalab.domain.exceptions import ProviderError, SignatureError
from healthdatalab.infrastructure.clients.stripe_client import (
    StripeClient,
    build_checkout_payload,
    parse_webhook_event,
)


def _client(webhook_secret: str | None = None) -> StripeClient:
    return StripeClient(secret_key="sk_test_123", webhook_secret=webhook_secret)


def test_payload_for_stored_price():
    payload = build_checkout_payload(
        CheckoutSessionParams(
            mode="payment",
            success_url="https://healthdatalab.com/thanks",
            cancel_url="https://healthdatalab.com/pricing",
            line_item=CheckoutLineItem(price_id="price_course"),
        )
    )

    assert payload["line_items"] == [{"price": "price_course", "quantity": 1}]
    assert payload["mode"] == "payment"
    assert payload["payment_method_types"] == ["card"]
    assert payload["automatic_tax"] == {"enabled": True}
    assert payload["allow_promotion_codes"] is True
    assert "subscription_data" not in payload
    assert "custom_text" not in payload
    assert "metadata" not in payload


def test_payload_for_converted_subscription_with_plan():
    payload = build_checkout_payload(
        CheckoutSessionParams(
            mode="subscription",
            success_url="https://healthdatalab.com/thanks",
            cancel_url="https://healthdatalab.com/pricing",
            line_item=CheckoutLineItem(
                product_id="prod_course",
                currency="usd",
                unit_amount=44069,
                recurring_interval="month",
            ),
            trial_days=14,
            subscription_description="3 monthly payments for Course",
            subscription_metadata={"installments": "3", "tier": "Course"},
            session_metadata={"tier": "course"},
            submit_message="Payment plan: 3 monthly payments.",
        )
    )

    assert payload["line_items"] == [
        {
            "price_data": {
                "currency": "usd",
                "product": "prod_course",
                "unit_amount": 44069,
                "recurring": {"interval": "month"},
            },
            "quantity": 1,
        }
    ]
    assert payload["subscription_data"] == {
        "trial_period_days": 14,
        "trial_settings": {"end_behavior": {"missing_payment_method": "cancel"}},
        "description": "3 monthly payments for Course",
        "metadata": {"installments": "3", "tier": "Course"},
    }
    assert payload["custom_text"] == {"submit": {"message": "Payment plan: 3 monthly payments."}}
    assert payload["metadata"] == {"tier": "course"}


def test_parse_invoice_paid_with_top_level_subscription():
    event = parse_webhook_event(
        {
            "id": "evt_1",
            "type": "invoice.paid",
            "data": {"object": {"id": "in_1", "subscription": "sub_1"}},
        }
    )

    assert event.invoice_paid is not None
    assert event.invoice_paid.subscription_id == "sub_1"


def test_parse_invoice_paid_with_parent_subscription_details():
    event = parse_webhook_event(
        {
            "id": "evt_1",
            "type": "invoice.paid",
            "data": {
                "object": {
                    "id": "in_1",
                    "parent": {"subscription_details": {"subscription": "sub_2"}},
                }
            },
        }
    )

    assert event.invoice_paid.subscription_id == "sub_2"


def test_parse_checkout_completed():
    event = parse_webhook_event(
        {
            "id": "evt_2",
            "type": "checkout.session.completed",
            "data": {
                "object": {
                    "id": "cs_1",
                    "mode": "payment",
                    "amount_total": 69700,
                    "currency": "gbp",
                    "customer_details": {"email": "jane@example.com", "name": "Jane"},
                    "metadata": {"tier": "course"},
                }
            },
        }
    )

    completed = event.checkout_completed
    assert completed.customer_email == "jane@example.com"
    assert completed.customer_name == "Jane"
    assert completed.amount_total == 69700
    assert completed.metadata == {"tier": "course"}


def test_parse_other_event_has_no_payload():
    event = parse_webhook_event({"id": "evt_3", "type": "customer.created", "data": {"object": {}}})

    assert event.invoice_paid is None
    assert event.checkout_completed is None


def test_verify_webhook_without_secret_parses_json():
    payload = json.dumps(
        {"id": "evt_1", "type": "invoice.paid", "data": {"object": {"id": "in_1", "subscription": "sub_1"}}}
    ).encode()

    event = _client().verify_webhook(signature=None, payload=payload)

    assert event.event_type == "invoice.paid"


def test_verify_webhook_rejects_garbage():
    with pytest.raises(SignatureError):
        _client().verify_webhook(signature=None, payload=b"not json")


def test_verify_webhook_requires_signature_when_secret_configured():
    with pytest.raises(SignatureError):
        _client(webhook_secret="whsec_test").verify_webhook(signature=None, payload=b"{}")


def test_verify_webhook_rejects_bad_signature():
    with pytest.raises(SignatureError):
        _client(webhook_secret="whsec_test").verify_webhook(
            signature="t=1,v1=deadbeef",
            payload=b'{"id": "evt_1", "type": "invoice.paid"}',
        )


def test_list_completed_sessions_passes_cursor(monkeypatch: pytest.MonkeyPatch):
    calls = []

    def fake_list(**kwargs):
        calls.append(kwargs)
        return SimpleNamespace(data=[SimpleNamespace(id="cs_9")], has_more=True)

    monkeypatch.setattr(stripe.checkout.Session, "list", fake_list)

    page = _client().list_completed_sessions(limit=100, starting_after="cs_8")

    assert calls == [{"status": "complete", "limit": 100, "starting_after": "cs_8"}]
    assert page.session_ids == ["cs_9"]
    assert page.has_more is True


def test_cancel_of_already_cancelled_subscription_returns_false(monkeypatch: pytest.MonkeyPatch):
    def fake_cancel(subscription_id):
        raise stripe.InvalidRequestError("This subscription is already canceled.", None)

    monkeypatch.setattr(stripe.Subscription, "cancel", fake_cancel)
    monkeypatch.setattr(
        stripe.Subscription,
        "retrieve",
        lambda subscription_id: SimpleNamespace(id=subscription_id, status="canceled", metadata={}),
    )

    assert _client().cancel_subscription(subscription_id="sub_1") is False


def test_cancel_failure_on_active_subscription_is_provider_error(monkeypatch: pytest.MonkeyPatch):
    def fake_cancel(subscription_id):
        raise stripe.InvalidRequestError("No such subscription.", None)

    monkeypatch.setattr(stripe.Subscription, "cancel", fake_cancel)
    monkeypatch.setattr(
        stripe.Subscription,
        "retrieve",
        lambda subscription_id: SimpleNamespace(id=subscription_id, status="active", metadata={}),
    )

    with pytest.raises(ProviderError):
        _client().cancel_subscription(subscription_id="sub_1")


def test_create_checkout_session_wraps_provider_rejection(monkeypatch: pytest.MonkeyPatch):
    def fake_create(**kwargs):
        raise stripe.InvalidRequestError("No such price: 'price_missing'", "line_items")

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)

    with pytest.raises(ProviderError, match="No such price"):
        _client().create_checkout_session(
            params=CheckoutSessionParams(
                mode="payment",
                success_url="https://healthdatalab.com/thanks",
                cancel_url="https://healthdatalab.com/pricing",
                line_item=CheckoutLineItem(price_id="price_missing"),
            )
        )


class FakeListObject:
    def __init__(self, *pages):
        self.pages = pages

    def auto_paging_iter(self):
        for page in self.pages:
            yield from page


def test_parse_event_with_non_object_data_is_rejected():
    with pytest.raises(SignatureError, match="invalid payload"):
        parse_webhook_event({"id": "evt_1", "type": "invoice.paid", "data": {"object": "in_1"}})


def test_verify_webhook_without_secret_rejects_malformed_data():
    payload = json.dumps({"type": "invoice.paid", "data": "in_1"}).encode()

    with pytest.raises(SignatureError):
        _client().verify_webhook(signature=None, payload=payload)


def test_list_paid_invoices_reads_every_page(monkeypatch: pytest.MonkeyPatch):
    calls = []

    def fake_list(**kwargs):
        calls.append(kwargs)
        return FakeListObject(
            [SimpleNamespace(id="in_trial", amount_paid=0), SimpleNamespace(id="in_1", amount_paid=34700)],
            [SimpleNamespace(id="in_2", amount_paid=34700), SimpleNamespace(id="in_3", amount_paid=None)],
        )

    monkeypatch.setattr(stripe.Invoice, "list", fake_list)

    invoices = _client().list_paid_invoices(subscription_id="sub_1")

    assert calls == [{"subscription": "sub_1", "status": "paid", "limit": 100}]
    assert [(invoice.id, invoice.amount_paid) for invoice in invoices] == [
        ("in_trial", 0),
        ("in_1", 34700),
        ("in_2", 34700),
        ("in_3", 0),
    ]


def test_list_paid_invoices_wraps_stripe_errors(monkeypatch: pytest.MonkeyPatch):
    def fake_list(**kwargs):
        raise stripe.APIConnectionError("Network unreachable")

    monkeypatch.setattr(stripe.Invoice, "list", fake_list)

    with pytest.raises(ProviderError, match="Network unreachable"):
        _client().list_paid_invoices(subscription_id="sub_1")


def test_list_line_item_price_ids_reads_every_page(monkeypatch: pytest.MonkeyPatch):
    calls = []

    def fake_list_line_items(session_id, **kwargs):
        calls.append((session_id, kwargs))
        return FakeListObject(
            [SimpleNamespace(price=SimpleNamespace(id="price_early_1")), SimpleNamespace(price=None)],
            [SimpleNamespace(price="price_other")],
        )

    monkeypatch.setattr(stripe.checkout.Session, "list_line_items", fake_list_line_items)

    price_ids = _client().list_line_item_price_ids(session_id="cs_1")

    assert calls == [("cs_1", {"limit": 100})]
    assert price_ids == ["price_early_1", "price_other"]


def test_list_line_item_price_ids_wraps_stripe_errors(monkeypatch: pytest.MonkeyPatch):
    def fake_list_line_items(session_id, **kwargs):
        raise stripe.InvalidRequestError("No such checkout session", "id")

    monkeypatch.setattr(stripe.checkout.Session, "list_line_items", fake_list_line_items)

    with pytest.raises(ProviderError, match="No such checkout session"):
        _client().list_line_item_price_ids(session_id="cs_missing")


def test_get_price_product_id(monkeypatch: pytest.MonkeyPatch):
    prices = {
        "price_plain": SimpleNamespace(id="price_plain", product="prod_course"),
        "price_expanded": SimpleNamespace(id="price_expanded", product=SimpleNamespace(id="prod_report")),
    }
    monkeypatch.setattr(stripe.Price, "retrieve", lambda price_id: prices[price_id])

    assert _client().get_price_product_id(price_id="price_plain") == "prod_course"
    assert _client().get_price_product_id(price_id="price_expanded") == "prod_report"


def test_get_price_product_id_without_product_is_provider_error(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(stripe.Price, "retrieve", lambda price_id: SimpleNamespace(id=price_id, product=None))

    with pytest.raises(ProviderError, match="has no product"):
        _client().get_price_product_id(price_id="price_orphan")


def test_get_price_product_id_wraps_stripe_errors(monkeypatch: pytest.MonkeyPatch):
    def fake_retrieve(price_id):
        raise stripe.InvalidRequestError(f"No such price: '{price_id}'", "id")

    monkeypatch.setattr(stripe.Price, "retrieve", fake_retrieve)

    with pytest.raises(ProviderError, match="No such price"):
        _client().get_price_product_id(price_id="price_missing")


def test_create_checkout_session_sends_payload(monkeypatch: pytest.MonkeyPatch):
    calls = []

    def fake_create(**kwargs):
        calls.append(kwargs)
        return SimpleNamespace(id="cs_new")

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)
    params = CheckoutSessionParams(
        mode="payment",
        success_url="https://healthdatalab.com/thanks",
        cancel_url="https://healthdatalab.com/pricing",
        line_item=CheckoutLineItem(price_id="price_course"),
        session_metadata={"tier": "course"},
    )

    session_id = _client().create_checkout_session(params=params)

    assert session_id == "cs_new"
    assert calls == [build_checkout_payload(params)]
