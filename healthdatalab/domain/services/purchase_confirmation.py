from __future__ import annotations

from healthdatalab.domain.services.contact import escape_text
from healthdatalab.domain.services.currency import format_money, minor_to_major


CONFIRMATION_SUBJECT = "Your HealthDataLab purchase is confirmed"


def purchase_label(*, tier_name: str | None, tier: str | None) -> str:
    return tier_name or tier or "your HealthDataLab purchase"


def render_confirmation_html(
    *,
    customer_name: str | None,
    label: str,
    amount_total: int | None,
    currency: str | None,
) -> str:
    greeting = f"Hi {escape_text(customer_name)}," if customer_name else "Hi,"
    parts = [
        f"<p>{greeting}</p>",
        f"<p>Thank you for your order. Your payment for <strong>{escape_text(label)}</strong> has been received.</p>",
    ]
    if amount_total is not None and currency:
        amount = format_money(minor_to_major(amount_total), currency.upper())
        parts.append(f"<p><strong>Amount paid today:</strong> {escape_text(amount)}</p>")
    parts.append("<p>We will be in touch shortly with your next steps.</p>")
    parts.append("<p>The HealthDataLab team</p>")
    return "".join(parts)


def render_confirmation_text(
    *,
    customer_name: str | None,
    label: str,
    amount_total: int | None,
    currency: str | None,
) -> str:
    lines = [
        f"Hi {customer_name}," if customer_name else "Hi,",
        "",
        f"Thank you for your order. Your payment for {label} has been received.",
    ]
    if amount_total is not None and currency:
        lines.append(f"Amount paid today: {format_money(minor_to_major(amount_total), currency.upper())}")
    lines.extend(["", "We will be in touch shortly with your next steps.", "", "The HealthDataLab team"])
    return "\n".join(lines)
