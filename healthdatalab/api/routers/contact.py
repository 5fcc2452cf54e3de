from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from healthdatalab.api.deps import get_send_contact_message_use_case
from healthdatalab.api.schemas.contact import ContactRequest, ContactResponse
from healthdatalab.application.dto.contact import SendContactMessageInput
from healthdatalab.application.use_cases.send_contact_message import SendContactMessageUseCase
from healthdatalab.domain.exceptions import ProviderError, ValidationError


router = APIRouter()
logger = logging.getLogger(__name__)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


@router.post("/api/send-email", response_model=ContactResponse)
@router.post("/.netlify/functions/send-email", response_model=ContactResponse)
def send_email(
    req: ContactRequest,
    use_case: SendContactMessageUseCase = Depends(get_send_contact_message_use_case),
):
    try:
        use_case.execute(
            SendContactMessageInput(
                name=_text(req.name),
                email=_text(req.email),
                subject=_text(req.subject),
                message=_text(req.message),
                bot_field=_text(req.bot_field) if req.bot_field else None,
            )
        )
    except ValidationError as exc:
        logger.info("contact_router: invalid_request detail=%s", exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ProviderError as exc:
        logger.exception("contact_router: delivery_failed")
        raise HTTPException(status_code=500, detail="Failed to send email") from exc

    return ContactResponse(success=True)
