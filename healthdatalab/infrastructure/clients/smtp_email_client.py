from __future__ import annotations

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
import logging
import smtplib

from healthdatalab.application.ports.email_port import EmailPort
from healthdatalab.domain.entities.email import EmailAddress, OutboundEmail
from healthdatalab.domain.exceptions import EmailDeliveryError


logger = logging.getLogger(__name__)


def _format_address(address: EmailAddress) -> str:
    return formataddr((address.name or "", address.address))


class SmtpEmailClient(EmailPort):
    def __init__(
        self,
        *,
        host: str,
        port: int,
        username: str,
        password: str,
        timeout_seconds: float,
    ):
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._timeout = timeout_seconds

    @property
    def enabled(self) -> bool:
        return bool(self._host and self._username and self._password)

    def _build_message(self, message: OutboundEmail) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = _format_address(message.sender)
        msg["To"] = _format_address(message.to)
        if message.reply_to is not None:
            msg["Reply-To"] = _format_address(message.reply_to)

        if message.text_body:
            msg.attach(MIMEText(message.text_body, "plain", "utf-8"))
        msg.attach(MIMEText(message.html_body, "html", "utf-8"))
        return msg

    def send(self, *, message: OutboundEmail) -> None:
        if not self.enabled:
            raise EmailDeliveryError("SMTP relay is not configured.")

        msg = self._build_message(message)
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                server.starttls()
                server.login(self._username, self._password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("smtp_email: send failed host=%s subject=%r detail=%s", self._host, message.subject, exc)
            raise EmailDeliveryError("Failed to send email") from exc

        logger.info("smtp_email: sent subject=%r", message.subject)
