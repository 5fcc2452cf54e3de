from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class StripeWebhookResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    received: bool = True
    event_type: str = Field(..., alias="eventType")
    handled: bool
    action: str | None = None
