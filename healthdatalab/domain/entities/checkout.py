from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal


CheckoutMode = Literal["payment", "subscription"]
CHECKOUT_MODES = {"payment", "subscription"}


@dataclass(frozen=True)
class CheckoutLineItem:
    price_id: str | None = None
    product_id: str | None = None
    currency: str | None = None
    unit_amount: int | None = None
    recurring_interval: str | None = None

    @property
    def is_ad_hoc(self) -> bool:
        return self.price_id is None


@dataclass(frozen=True)
class CheckoutSessionParams:
    mode: CheckoutMode
    success_url: str
    cancel_url: str
    line_item: CheckoutLineItem
    trial_days: int | None = None
    subscription_description: str | None = None
    subscription_metadata: dict[str, str] = field(default_factory=dict)
    session_metadata: dict[str, str] = field(default_factory=dict)
    submit_message: str | None = None
