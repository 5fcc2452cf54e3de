from __future__ import annotations

from decimal import Decimal
from typing import Protocol


class ExchangeRatePort(Protocol):
    def get_rate(self, currency: str) -> Decimal:
        ...
