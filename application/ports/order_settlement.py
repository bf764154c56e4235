"""
Order settlement port: the host order system's capabilities the payment
flows depend on. Store operations are async, sinks are synchronous.
"""
from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from domain.payment.entity import Order


@runtime_checkable
class OrderSettlementPort(Protocol):
    async def mark_paid(self, order: Order, payment_id: Optional[str], send_invoice: bool = False) -> None: ...

    async def empty_cart(self) -> None: ...

    async def save(self, order: Order) -> None: ...

    def log(self, level: str, message: str) -> None: ...

    def notify(self, level: str, message: str) -> None: ...

    def emit_domain_event(self, name: str, payload: Any) -> None: ...

    def track_event(self, name: str, properties: dict[str, Any]) -> None: ...


@runtime_checkable
class OrderLookup(Protocol):
    async def get_order(self, order_id: str) -> Optional[Order]: ...
