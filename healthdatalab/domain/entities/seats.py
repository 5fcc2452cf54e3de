from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CheckoutSessionPage:
    session_ids: list[str]
    has_more: bool


@dataclass(frozen=True)
class SeatAvailability:
    total: int
    sold: int
    remaining: int
