from __future__ import annotations

from collections.abc import Iterable

from healthdatalab.domain.entities.seats import SeatAvailability


def session_holds_seat(price_ids: Iterable[str | None], seat_price_ids: frozenset[str]) -> bool:
    return any(price_id in seat_price_ids for price_id in price_ids if price_id)


def build_seat_availability(*, total: int, sold: int) -> SeatAvailability:
    return SeatAvailability(total=total, sold=sold, remaining=max(0, total - sold))
