from __future__ import annotations

from collections.abc import Iterable
import logging

from healthdatalab.application.dto.seats import SeatAvailabilityOutput
from healthdatalab.application.ports.stripe_port import StripePort
from healthdatalab.domain.services.seats import build_seat_availability, session_holds_seat


SESSION_PAGE_SIZE = 100
logger = logging.getLogger(__name__)


class CountSeatsUseCase:
    def __init__(
        self,
        *,
        stripe_port: StripePort,
        seat_price_ids: Iterable[str],
        total_seats: int,
    ):
        self._stripe_port = stripe_port
        self._seat_price_ids = frozenset(seat_price_ids)
        self._total_seats = total_seats

    def execute(self) -> SeatAvailabilityOutput:
        sold = 0
        scanned = 0
        starting_after: str | None = None

        while True:
            page = self._stripe_port.list_completed_sessions(
                limit=SESSION_PAGE_SIZE,
                starting_after=starting_after,
            )
            for session_id in page.session_ids:
                scanned += 1
                price_ids = self._stripe_port.list_line_item_price_ids(session_id=session_id)
                if session_holds_seat(price_ids, self._seat_price_ids):
                    sold += 1

            if not page.has_more or not page.session_ids:
                break
            starting_after = page.session_ids[-1]

        availability = build_seat_availability(total=self._total_seats, sold=sold)
        logger.info(
            "count_seats: scanned=%s sold=%s total=%s remaining=%s",
            scanned,
            availability.sold,
            availability.total,
            availability.remaining,
        )
        return SeatAvailabilityOutput(
            total=availability.total,
            sold=availability.sold,
            remaining=availability.remaining,
        )
