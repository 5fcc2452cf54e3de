from __future__ import annotations

import logging

from healthdatalab.application.dto.billing import (
    StripeCheckoutCompletedEventData,
    StripeInvoicePaidEventData,
    StripeWebhookInput,
    StripeWebhookOutput,
)
from healthdatalab.application.ports.email_port import EmailPort
from healthdatalab.application.ports.stripe_port import StripePort
from healthdatalab.domain.entities.email import EmailAddress, OutboundEmail
from healthdatalab.domain.entities.subscription import is_subscription_cancelled
from healthdatalab.domain.exceptions import ProviderError
from healthdatalab.domain.services.checkout_session import (
    INSTALLMENTS_METADATA_KEY,
    TIER_METADATA_KEY,
    TIER_NAME_METADATA_KEY,
)
from healthdatalab.domain.services.installments import (
    count_paid_installments,
    decide_installment_action,
    parse_installment_cap,
)
from healthdatalab.domain.services.purchase_confirmation import (
    CONFIRMATION_SUBJECT,
    purchase_label,
    render_confirmation_html,
    render_confirmation_text,
)


logger = logging.getLogger(__name__)


class ProcessStripeWebhookUseCase:
    """Reacts to Stripe events.

    Every branch reads current state from Stripe before acting, so a redelivered
    event converges on the same outcome instead of repeating side effects.
    """

    def __init__(
        self,
        *,
        stripe_port: StripePort,
        email_port: EmailPort,
        sender: EmailAddress,
    ):
        self._stripe_port = stripe_port
        self._email_port = email_port
        self._sender = sender

    def execute(self, command: StripeWebhookInput) -> StripeWebhookOutput:
        event = self._stripe_port.verify_webhook(signature=command.signature, payload=command.payload)

        if event.event_type == "invoice.paid" and event.invoice_paid is not None:
            action = self._handle_invoice_paid(event.invoice_paid)
            return StripeWebhookOutput(event_type=event.event_type, handled=True, action=action)

        if event.event_type == "checkout.session.completed" and event.checkout_completed is not None:
            action = self._send_purchase_confirmation(event.checkout_completed)
            return StripeWebhookOutput(event_type=event.event_type, handled=True, action=action)

        logger.debug("stripe_webhook: ignored event=%s type=%s", event.event_id, event.event_type)
        return StripeWebhookOutput(event_type=event.event_type, handled=False, action="ignored")

    def _handle_invoice_paid(self, invoice: StripeInvoicePaidEventData) -> str:
        if not invoice.subscription_id:
            return "no_subscription"

        subscription = self._stripe_port.retrieve_subscription(subscription_id=invoice.subscription_id)
        cap = parse_installment_cap(subscription.metadata.get(INSTALLMENTS_METADATA_KEY))

        paid_count = 0
        if cap is not None and not is_subscription_cancelled(subscription.status):
            paid_count = count_paid_installments(
                self._stripe_port.list_paid_invoices(subscription_id=subscription.id)
            )

        action = decide_installment_action(
            cap=cap,
            subscription_status=subscription.status,
            paid_count=paid_count,
        )
        if cap is not None:
            logger.info(
                "stripe_webhook: installments subscription=%s paid=%s cap=%s status=%s action=%s",
                subscription.id,
                paid_count,
                cap,
                subscription.status,
                action,
            )

        if action != "cancel":
            return action

        cancelled = self._stripe_port.cancel_subscription(subscription_id=subscription.id)
        if not cancelled:
            logger.info("stripe_webhook: subscription=%s was already cancelled", subscription.id)
            return "already_cancelled"
        logger.info("stripe_webhook: cancelled subscription=%s after %s payments", subscription.id, paid_count)
        return "cancelled"

    def _send_purchase_confirmation(self, session: StripeCheckoutCompletedEventData) -> str:
        if not session.customer_email:
            logger.info("stripe_webhook: session=%s has no customer email, skip confirmation", session.session_id)
            return "confirmation_skipped"

        label = purchase_label(
            tier_name=session.metadata.get(TIER_NAME_METADATA_KEY),
            tier=session.metadata.get(TIER_METADATA_KEY),
        )
        message = OutboundEmail(
            sender=self._sender,
            to=EmailAddress(address=session.customer_email, name=session.customer_name),
            subject=CONFIRMATION_SUBJECT,
            html_body=render_confirmation_html(
                customer_name=session.customer_name,
                label=label,
                amount_total=session.amount_total,
                currency=session.currency,
            ),
            text_body=render_confirmation_text(
                customer_name=session.customer_name,
                label=label,
                amount_total=session.amount_total,
                currency=session.currency,
            ),
        )
        try:
            self._email_port.send(message=message)
        except ProviderError as exc:
            # best effort, the webhook still succeeds
            logger.warning(
                "stripe_webhook: confirmation email failed session=%s detail=%s",
                session.session_id,
                exc,
            )
            return "confirmation_failed"

        logger.info("stripe_webhook: confirmation sent session=%s", session.session_id)
        return "confirmation_sent"
