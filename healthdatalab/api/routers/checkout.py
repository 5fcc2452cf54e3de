from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from healthdatalab.api.deps import get_create_checkout_session_use_case
from healthdatalab.api.schemas.checkout import (
    CreateCheckoutSessionRequest,
    CreateCheckoutSessionResponse,
)
from healthdatalab.application.dto.billing import CreateCheckoutSessionInput
from healthdatalab.application.use_cases.create_checkout_session import CreateCheckoutSessionUseCase
from healthdatalab.domain.exceptions import ProviderError, ValidationError


router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/api/create-checkout", response_model=CreateCheckoutSessionResponse)
@router.post("/.netlify/functions/create-checkout", response_model=CreateCheckoutSessionResponse)
def create_checkout(
    req: CreateCheckoutSessionRequest,
    use_case: CreateCheckoutSessionUseCase = Depends(get_create_checkout_session_use_case),
):
    try:
        output = use_case.execute(
            CreateCheckoutSessionInput(
                price_id=req.price_id,
                mode=req.mode,
                success_url=req.success_url,
                cancel_url=req.cancel_url,
                currency=req.currency,
                base_amount_gbp=req.base_amount_gbp,
                trial_days=req.trial_days,
                installments=req.installments,
                installment_amount=req.installment_amount,
                tier_name=req.tier_name,
                recurring_interval=req.recurring_interval,
                tier=req.tier,
            )
        )
    except ValidationError as exc:
        logger.warning(
            "checkout_router: invalid_request price=%s currency=%s detail=%s",
            req.price_id,
            req.currency,
            exc,
        )
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ProviderError as exc:
        logger.exception(
            "checkout_router: provider_error price=%s currency=%s",
            req.price_id,
            req.currency,
        )
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return CreateCheckoutSessionResponse(session_id=output.session_id)
