"""Infrastructure adapter implementing the application OrderSettlementPort
and OrderLookup on top of the SQLAlchemy order repository and structlog.

Customer notices are request scoped: the API layer opens a collection
with begin_notices() and reads it back with collect_notices() once the
orchestrator returns.
"""
from __future__ import annotations

from contextvars import ContextVar
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from application.ports.order_settlement import OrderLookup, OrderSettlementPort
from core.logging_config import get_logger
from domain.payment.entity import Order
from domain.payment.events import PaymentSucceeded
from infrastructure.repositories.order_repository import SQLAlchemyOrderRepository
from shared.codes.payment_codes import SUCCESSFUL_PAYMENT_EVENT


logger = get_logger("payments.orders")
events_logger = get_logger("payments.events")

_notices_var: ContextVar[Optional[list[dict[str, str]]]] = ContextVar("payment_notices", default=None)

_LOG_LEVELS = {"debug", "info", "warning", "error", "critical"}


def begin_notices() -> list[dict[str, str]]:
    """Start a fresh notice collection for the current request."""
    notices: list[dict[str, str]] = []
    _notices_var.set(notices)
    return notices


def collect_notices() -> list[dict[str, str]]:
    return list(_notices_var.get() or [])


class OrderSettlementAdapter(OrderSettlementPort, OrderLookup):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_order(self, order_id: str) -> Optional[Order]:
        async with self.session_factory() as session:
            return await SQLAlchemyOrderRepository(session).get_by_id(str(order_id))

    async def save(self, order: Order) -> None:
        async with self.session_factory() as session:
            await SQLAlchemyOrderRepository(session).save(order)
            await session.commit()

    async def mark_paid(self, order: Order, payment_id: Optional[str], send_invoice: bool = False) -> None:
        order.mark_paid(payment_id)
        await self.save(order)
        logger.info("order_paid", order_id=order.id, payment_id=payment_id)
        if send_invoice:
            # Invoice delivery belongs to the host order system
            logger.info("order_invoice_requested", order_id=order.id)

    async def empty_cart(self) -> None:
        logger.info("cart_emptied")

    def log(self, level: str, message: str) -> None:
        level = level.lower()
        if level not in _LOG_LEVELS:
            level = "info"
        getattr(logger, level)(message)

    def notify(self, level: str, message: str) -> None:
        notices = _notices_var.get()
        if notices is None:
            notices = begin_notices()
        notices.append({"level": level, "message": message})

    def emit_domain_event(self, name: str, payload: Any) -> None:
        if name == SUCCESSFUL_PAYMENT_EVENT and isinstance(payload, dict):
            event = PaymentSucceeded.from_payment(payload)
            events_logger.info(event.name, event_id=event.event_id, provider_ref=event.provider_ref)
            return
        events_logger.info(name, payload=payload)

    def track_event(self, name: str, properties: dict[str, Any]) -> None:
        events_logger.info("analytics_event", event_name=name, properties=properties)
