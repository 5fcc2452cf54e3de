from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EmailAddress:
    address: str
    name: str | None = None


@dataclass(frozen=True)
class OutboundEmail:
    sender: EmailAddress
    to: EmailAddress
    subject: str
    html_body: str
    text_body: str | None = None
    reply_to: EmailAddress | None = None
