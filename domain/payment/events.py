"""
Payment domain events.

Dataclass events record settlement facts for downstream handlers. The
orchestrators hand the raw payload to the settlement port by name and the
adapter wraps it here; the domain stays free of infrastructure imports.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
import uuid

from shared.codes.payment_codes import SUCCESSFUL_PAYMENT_EVENT


@dataclass
class PaymentEvent:
    provider: str
    provider_ref: Optional[str] = None
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    name: str = "payment_event"


@dataclass
class PaymentSucceeded(PaymentEvent):
    # Raw payment record as reported by the processor
    payment: dict[str, Any] = field(default_factory=dict)
    name: str = SUCCESSFUL_PAYMENT_EVENT

    @classmethod
    def from_payment(cls, payment: dict[str, Any], provider: str = "paymongo") -> "PaymentSucceeded":
        return cls(provider=provider, provider_ref=payment.get("id"), payment=payment)
