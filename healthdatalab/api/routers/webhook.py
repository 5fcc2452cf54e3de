from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from healthdatalab.api.deps import get_process_stripe_webhook_use_case
from healthdatalab.api.schemas.webhook import StripeWebhookResponse
from healthdatalab.application.dto.billing import StripeWebhookInput
from healthdatalab.application.use_cases.process_stripe_webhook import ProcessStripeWebhookUseCase
from healthdatalab.domain.exceptions import ProviderError, SignatureError


router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/api/stripe-webhook", response_model=StripeWebhookResponse)
@router.post("/.netlify/functions/stripe-webhook", response_model=StripeWebhookResponse)
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None, alias="Stripe-Signature"),
    use_case: ProcessStripeWebhookUseCase = Depends(get_process_stripe_webhook_use_case),
):
    payload = await request.body()
    try:
        output = await run_in_threadpool(
            use_case.execute,
            StripeWebhookInput(signature=stripe_signature, payload=payload),
        )
    except SignatureError as exc:
        logger.warning("webhook_router: rejected detail=%s", exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ProviderError as exc:
        logger.exception("webhook_router: processing_failed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return StripeWebhookResponse(
        event_type=output.event_type,
        handled=output.handled,
        action=output.action,
    )
