from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ContactRequest(BaseModel):
    """Contact form body.

    Fields are untyped so a filled honeypot is answered before any field is
    checked; the use case does the validation.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: Any = None
    email: Any = None
    subject: Any = None
    message: Any = None
    bot_field: Any = Field(default=None, alias="botField")


class ContactResponse(BaseModel):
    success: bool = True
