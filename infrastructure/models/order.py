"""
Order table mapping. Persistence detail only; business rules live in
domain.payment.entity.Order.
"""
from sqlalchemy import Column, String, Numeric, DateTime, JSON
from datetime import datetime, timezone

from .base import Base


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(String(64), primary_key=True)
    order_key = Column(String(100), nullable=False, default="")

    total = Column(Numeric(precision=15, scale=2), nullable=False)
    currency = Column(String(3), nullable=False, default="PHP")
    payment_method = Column(String(50), nullable=True, index=True)
    status = Column(String(20), nullable=False, default="pending", index=True)

    billing_first_name = Column(String(100), nullable=True)
    billing_last_name = Column(String(100), nullable=True)
    billing_email = Column(String(255), nullable=True)
    billing_phone = Column(String(50), nullable=True)
    billing_address_1 = Column(String(255), nullable=True)
    billing_address_2 = Column(String(255), nullable=True)
    billing_city = Column(String(100), nullable=True)
    billing_state = Column(String(100), nullable=True)
    billing_postcode = Column(String(20), nullable=True)
    billing_country = Column(String(2), nullable=True)

    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON, nullable=False, default=dict)
    items = Column(JSON, nullable=False, default=list)

    transaction_id = Column(String(200), nullable=True, index=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self):
        return f"<OrderModel(id={self.id}, status={self.status}, total={self.total})>"
