from __future__ import annotations

from pydantic import BaseModel


class SeatCountResponse(BaseModel):
    total: int
    sold: int
    remaining: int
