from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal


InstallmentAction = Literal[
    "uncapped",
    "below_cap",
    "cancel",
    "already_cancelled",
]


@dataclass(frozen=True)
class Subscription:
    id: str
    status: str
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Invoice:
    id: str
    amount_paid: int


def is_subscription_cancelled(status: str) -> bool:
    return status in {"canceled", "incomplete_expired"}
