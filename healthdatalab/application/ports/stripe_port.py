from __future__ import annotations

from typing import Protocol

from healthdatalab.application.dto.billing import StripeWebhookEvent
from healthdatalab.domain.entities.checkout import CheckoutSessionParams
from healthdatalab.domain.entities.seats import CheckoutSessionPage
from healthdatalab.domain.entities.subscription import Invoice, Subscription


class StripePort(Protocol):
    def get_price_product_id(self, *, price_id: str) -> str:
        ...

    def create_checkout_session(self, *, params: CheckoutSessionParams) -> str:
        ...

    def list_completed_sessions(
        self,
        *,
        limit: int,
        starting_after: str | None,
    ) -> CheckoutSessionPage:
        ...

    def list_line_item_price_ids(self, *, session_id: str) -> list[str]:
        ...

    def retrieve_subscription(self, *, subscription_id: str) -> Subscription:
        ...

    def cancel_subscription(self, *, subscription_id: str) -> bool:
        """Cancel the subscription; False when it was already cancelled."""
        ...

    def list_paid_invoices(self, *, subscription_id: str) -> list[Invoice]:
        ...

    def verify_webhook(self, *, signature: str | None, payload: bytes) -> StripeWebhookEvent:
        ...
