from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SendContactMessageInput:
    name: str | None
    email: str | None
    message: str | None
    subject: str | None = None
    bot_field: str | None = None


@dataclass(frozen=True)
class SendContactMessageOutput:
    sent: bool
