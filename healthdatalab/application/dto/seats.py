from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SeatAvailabilityOutput:
    total: int
    sold: int
    remaining: int
