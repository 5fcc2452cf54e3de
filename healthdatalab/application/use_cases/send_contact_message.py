from __future__ import annotations

import logging

from healthdatalab.application.dto.contact import SendContactMessageInput, SendContactMessageOutput
from healthdatalab.application.ports.email_port import EmailPort
from healthdatalab.domain.entities.email import EmailAddress, OutboundEmail
from healthdatalab.domain.services.contact import (
    contact_subject,
    is_honeypot_triggered,
    render_contact_html,
    render_contact_text,
    validate_contact_fields,
)


logger = logging.getLogger(__name__)


class SendContactMessageUseCase:
    def __init__(
        self,
        *,
        email_port: EmailPort,
        sender: EmailAddress,
        inbox: EmailAddress,
    ):
        self._email_port = email_port
        self._sender = sender
        self._inbox = inbox

    def execute(self, command: SendContactMessageInput) -> SendContactMessageOutput:
        if is_honeypot_triggered(command.bot_field):
            logger.info("send_contact_message: honeypot filled, dropping submission")
            return SendContactMessageOutput(sent=False)

        validate_contact_fields(name=command.name, email=command.email, message=command.message)

        self._email_port.send(
            message=OutboundEmail(
                sender=self._sender,
                to=self._inbox,
                reply_to=EmailAddress(address=command.email, name=command.name),
                subject=contact_subject(command.subject),
                html_body=render_contact_html(
                    name=command.name,
                    email=command.email,
                    subject=command.subject,
                    message=command.message,
                ),
                text_body=render_contact_text(
                    name=command.name,
                    email=command.email,
                    subject=command.subject,
                    message=command.message,
                ),
            )
        )
        logger.info("send_contact_message: relayed subject=%r", command.subject)
        return SendContactMessageOutput(sent=True)
