"""
Order repository backed by SQLAlchemy.
"""
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.payment.entity import Order, OrderItem, OrderStatus
from domain.payment.repository import OrderRepository
from infrastructure.models.order import OrderModel
from core.logging_config import get_logger


logger = get_logger(__name__)

_BILLING_FIELDS = (
    "billing_first_name",
    "billing_last_name",
    "billing_email",
    "billing_phone",
    "billing_address_1",
    "billing_address_2",
    "billing_city",
    "billing_state",
    "billing_postcode",
    "billing_country",
)


class SQLAlchemyOrderRepository(OrderRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: OrderModel) -> Order:
        return Order(
            id=model.id,
            total=Decimal(str(model.total)),
            currency=model.currency,
            payment_method=model.payment_method,
            status=OrderStatus(model.status),
            order_key=model.order_key or "",
            items=[
                OrderItem(
                    name=i["name"],
                    quantity=int(i["quantity"]),
                    product_id=str(i["product_id"]),
                    unit_price=Decimal(str(i["unit_price"])),
                    subtotal=Decimal(str(i["subtotal"])),
                )
                for i in (model.items or [])
            ],
            metadata=dict(model.meta or {}),
            transaction_id=model.transaction_id,
            paid_at=model.paid_at,
            **{name: getattr(model, name) for name in _BILLING_FIELDS},
        )

    def _apply(self, model: OrderModel, entity: Order) -> None:
        model.total = entity.total
        model.currency = entity.currency
        model.payment_method = entity.payment_method
        model.status = entity.status.value
        model.order_key = entity.order_key
        for name in _BILLING_FIELDS:
            setattr(model, name, getattr(entity, name))
        model.items = [
            {
                "name": i.name,
                "quantity": i.quantity,
                "product_id": i.product_id,
                "unit_price": str(i.unit_price),
                "subtotal": str(i.subtotal),
            }
            for i in entity.items
        ]
        # Reassign so the JSON column is flagged dirty
        model.meta = dict(entity.metadata)
        model.transaction_id = entity.transaction_id
        model.paid_at = entity.paid_at

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        result = await self.session.execute(select(OrderModel).where(OrderModel.id == order_id))
        db_order = result.scalar_one_or_none()
        return self._to_entity(db_order) if db_order else None

    async def save(self, order: Order) -> Order:
        """Insert or update, then flush. Commit stays with the caller."""
        db_order = await self.session.get(OrderModel, order.id)
        if db_order is None:
            db_order = OrderModel(id=order.id)
            self.session.add(db_order)
        self._apply(db_order, order)
        await self.session.flush()
        logger.debug("order_saved", order_id=order.id, status=order.status.value)
        return order
