from __future__ import annotations

import html
import re

from healthdatalab.domain.exceptions import ContactValidationError


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DEFAULT_SUBJECT = "General inquiry"
SUBJECT_PREFIX = "[HDL Contact]"


def is_honeypot_triggered(bot_field: str | None) -> bool:
    return bool(bot_field)


def validate_contact_fields(*, name: str | None, email: str | None, message: str | None) -> None:
    if not name or not email or not message:
        raise ContactValidationError("Missing required fields")
    if not EMAIL_PATTERN.match(email):
        raise ContactValidationError("Invalid email")


def escape_text(value: str) -> str:
    return html.escape(value, quote=False)


def escape_message_html(message: str) -> str:
    escaped = escape_text(message)
    return escaped.replace("\r\n", "\n").replace("\n", "<br>")


def contact_subject(subject: str | None) -> str:
    return f"{SUBJECT_PREFIX} {subject or DEFAULT_SUBJECT}"


def render_contact_html(*, name: str, email: str, subject: str | None, message: str) -> str:
    return (
        "<h3>New contact form submission</h3>"
        f"<p><strong>Name:</strong> {escape_text(name)}</p>"
        f"<p><strong>Email:</strong> {escape_text(email)}</p>"
        f"<p><strong>Subject:</strong> {escape_text(subject or DEFAULT_SUBJECT)}</p>"
        "<hr>"
        f"<p>{escape_message_html(message)}</p>"
    )


def render_contact_text(*, name: str, email: str, subject: str | None, message: str) -> str:
    return (
        "New contact form submission\n\n"
        f"Name: {name}\n"
        f"Email: {email}\n"
        f"Subject: {subject or DEFAULT_SUBJECT}\n\n"
        f"{message}\n"
    )
