from __future__ import annotations

import pytest

from healthdatalab.domain.exceptions import ContactValidationError, ValidationError
from healthdatalab.domain.services.contact import (
    contact_subject,
    escape_message_html,
    is_honeypot_triggered,
    render_contact_html,
    validate_contact_fields,
)
from healthdatalab.domain.services.geo_currency import currency_for_country
from healthdatalab.domain.services.purchase_confirmation import (
    purchase_label,
    render_confirmation_html,
    render_confirmation_text,
)
from healthdatalab.domain.services.seats import build_seat_availability, session_holds_seat


def test_honeypot():
    assert is_honeypot_triggered("x") is True
    assert is_honeypot_triggered("") is False
    assert is_honeypot_triggered(None) is False


def test_validate_contact_fields_requires_all_fields():
    with pytest.raises(ContactValidationError, match="Missing required fields"):
        validate_contact_fields(name="Jane", email="", message="Hi")


@pytest.mark.parametrize("email", ["jane", "jane@example", "jane doe@example.com", "@example.com"])
def test_validate_contact_fields_rejects_bad_email(email):
    with pytest.raises(ValidationError, match="Invalid email"):
        validate_contact_fields(name="Jane", email=email, message="Hi")


def test_validate_contact_fields_accepts_plain_address():
    validate_contact_fields(name="Jane", email="jane@example.co.uk", message="Hi")


def test_escape_message_html_converts_newlines_after_escaping():
    assert escape_message_html("<b>hi</b>\nline 2\r\nline 3") == "&lt;b&gt;hi&lt;/b&gt;<br>line 2<br>line 3"


def test_render_contact_html_escapes_every_field():
    body = render_contact_html(
        name="<Jane>",
        email="jane@example.com",
        subject=None,
        message="a & b",
    )

    assert "&lt;Jane&gt;" in body
    assert "General inquiry" in body
    assert "a &amp; b" in body
    assert "<Jane>" not in body


def test_contact_subject():
    assert contact_subject("Team plans") == "[HDL Contact] Team plans"
    assert contact_subject(None) == "[HDL Contact] General inquiry"
    assert contact_subject("") == "[HDL Contact] General inquiry"


def test_session_holds_seat():
    allow = frozenset({"price_early_1", "price_early_2"})

    assert session_holds_seat(["price_other", "price_early_2"], allow) is True
    assert session_holds_seat(["price_other", None], allow) is False
    assert session_holds_seat([], allow) is False


def test_build_seat_availability_never_goes_negative():
    assert build_seat_availability(total=25, sold=7).remaining == 18
    assert build_seat_availability(total=25, sold=30).remaining == 0


@pytest.mark.parametrize(
    "country, currency",
    [("US", "USD"), ("de", "EUR"), ("CH", "CHF"), ("CA", "CAD"), ("AU", "AUD"), ("GB", "GBP"), ("BR", "GBP"), (None, "GBP")],
)
def test_currency_for_country(country, currency):
    assert currency_for_country(country) == currency


def test_purchase_label_prefers_tier_name():
    assert purchase_label(tier_name="Pro Practitioner Course", tier="course") == "Pro Practitioner Course"
    assert purchase_label(tier_name=None, tier="course") == "course"
    assert purchase_label(tier_name=None, tier=None) == "your HealthDataLab purchase"


def test_render_confirmation_includes_amount_when_known():
    html_body = render_confirmation_html(customer_name="Jane", label="Course", amount_total=59700, currency="gbp")
    text_body = render_confirmation_text(customer_name=None, label="Course", amount_total=None, currency=None)

    assert "Hi Jane," in html_body
    assert "£597.00" in html_body
    assert text_body.startswith("Hi,")
    assert "Amount paid today" not in text_body
