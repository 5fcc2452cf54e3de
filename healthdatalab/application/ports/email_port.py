from __future__ import annotations

from typing import Protocol

from healthdatalab.domain.entities.email import OutboundEmail


class EmailPort(Protocol):
    def send(self, *, message: OutboundEmail) -> None:
        ...
