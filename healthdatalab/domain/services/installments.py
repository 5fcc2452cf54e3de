from __future__ import annotations

from collections.abc import Iterable

from healthdatalab.domain.entities.subscription import (
    InstallmentAction,
    Invoice,
    is_subscription_cancelled,
)


def parse_installment_cap(value: object) -> int | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text.isdigit():
        return None
    cap = int(text)
    return cap if cap > 0 else None


def count_paid_installments(invoices: Iterable[Invoice]) -> int:
    # zero-value invoices are trial periods, not installments
    return sum(1 for invoice in invoices if invoice.amount_paid > 0)


def decide_installment_action(
    *,
    cap: int | None,
    subscription_status: str,
    paid_count: int,
) -> InstallmentAction:
    if cap is None:
        return "uncapped"
    if is_subscription_cancelled(subscription_status):
        return "already_cancelled"
    if paid_count >= cap:
        return "cancel"
    return "below_cap"
