"""
Order aggregate as seen by the payment orchestrators.

The hosting order system owns persistence; this dataclass is the view the
orchestrators read and mutate at settlement or failure.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Optional

from domain.common.exceptions import DomainValidationException


class OrderStatus(str, Enum):
    """Order payment status"""
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


def to_minor_units(amount: Decimal | float | str) -> int:
    """Convert a major-unit amount to the processor's minor units.

    Rounds half-up to the nearest minor unit.
    """
    value = Decimal(str(amount)) * 100
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass
class OrderItem:
    name: str
    quantity: int
    product_id: str
    unit_price: Decimal
    subtotal: Decimal


@dataclass
class Order:
    """
    Order aggregate.

    Business rules:
    1. Total must not be negative
    2. Metadata carries correlation ids (payment_intent_id, source_id)
       across the redirect round-trip
    3. Settlement happens at most once: a paid order stays paid
    """

    id: str
    total: Decimal
    currency: str = "PHP"
    payment_method: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    order_key: str = ""

    billing_first_name: Optional[str] = None
    billing_last_name: Optional[str] = None
    billing_email: Optional[str] = None
    billing_phone: Optional[str] = None
    billing_address_1: Optional[str] = None
    billing_address_2: Optional[str] = None
    billing_city: Optional[str] = None
    billing_state: Optional[str] = None
    billing_postcode: Optional[str] = None
    billing_country: Optional[str] = None

    items: list[OrderItem] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    transaction_id: Optional[str] = None
    paid_at: Optional[datetime] = None

    def __post_init__(self):
        self.total = Decimal(str(self.total))
        if self.total < 0:
            raise DomainValidationException(
                f"Order total must not be negative: {self.total}",
                field="total",
            )
        if self.metadata is None:
            self.metadata = {}

    def get_meta(self, key: str) -> Any:
        return self.metadata.get(key)

    def set_meta(self, key: str, value: Any) -> None:
        self.metadata[key] = value

    @property
    def is_paid(self) -> bool:
        return self.status == OrderStatus.PAID

    def mark_paid(self, transaction_id: Optional[str] = None) -> None:
        """Mark the order paid with the processor reference."""
        if self.is_paid:
            raise DomainValidationException(
                f"Order {self.id} is already paid",
                field="status",
            )
        self.status = OrderStatus.PAID
        self.transaction_id = transaction_id
        self.paid_at = datetime.now(timezone.utc)

    def mark_pending(self) -> None:
        if self.is_paid:
            raise DomainValidationException(
                f"Cannot move paid order {self.id} back to pending",
                field="status",
            )
        self.status = OrderStatus.PENDING

