from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class CreateCheckoutSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    price_id: str | None = Field(default=None, alias="priceId")
    mode: str | None = None
    success_url: str | None = Field(default=None, alias="successUrl")
    cancel_url: str | None = Field(default=None, alias="cancelUrl")
    trial_days: int | None = Field(default=None, alias="trialDays")
    installments: int | None = None
    tier_name: str | None = Field(default=None, alias="tierName")
    installment_amount: Decimal | None = Field(default=None, alias="installmentAmount")
    currency: str | None = None
    base_amount_gbp: Decimal | None = Field(default=None, alias="baseAmountGBP")
    recurring_interval: str | None = Field(default=None, alias="recurringInterval")
    tier: str | None = None


class CreateCheckoutSessionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")
