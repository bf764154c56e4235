"""
Billing projection: order customer fields -> processor billing object.
"""
from __future__ import annotations

from application.dtos.payments import BillingAddress, BillingObject
from domain.payment.entity import Order


def to_billing_object(order: Order) -> BillingObject:
    """Project the order's billing fields; no validation beyond presence.

    Missing fields pass through as None so the processor rejects them and
    the rejection is surfaced as a notice.
    """
    name = " ".join([order.billing_first_name or "", order.billing_last_name or ""])
    return BillingObject(
        name=name,
        email=order.billing_email,
        phone=order.billing_phone,
        address=BillingAddress(
            line1=order.billing_address_1,
            line2=order.billing_address_2,
            city=order.billing_city,
            state=order.billing_state,
            country=order.billing_country,
            postal_code=order.billing_postcode,
        ),
    )
