from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from healthdatalab.api.deps import get_count_seats_use_case
from healthdatalab.api.schemas.seats import SeatCountResponse
from healthdatalab.application.use_cases.count_seats import CountSeatsUseCase
from healthdatalab.domain.exceptions import ProviderError


router = APIRouter()
logger = logging.getLogger(__name__)

SEAT_COUNT_CACHE_CONTROL = "public, max-age=300"


@router.get("/api/seat-count", response_model=SeatCountResponse)
@router.get("/.netlify/functions/seat-count", response_model=SeatCountResponse)
def seat_count(
    response: Response,
    use_case: CountSeatsUseCase = Depends(get_count_seats_use_case),
):
    try:
        output = use_case.execute()
    except ProviderError as exc:
        logger.exception("seats_router: seat_count_failed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    response.headers["Cache-Control"] = SEAT_COUNT_CACHE_CONTROL
    return SeatCountResponse(total=output.total, sold=output.sold, remaining=output.remaining)
