"""
PayMaya hosted checkout: build the checkout payload from an order and
hand back the hosted page URL. Settlement arrives later via webhook.
"""
from __future__ import annotations

from typing import Any, Optional

from application.dtos.payments import PaymentResult
from application.ports.order_settlement import OrderSettlementPort
from application.ports.payment_gateway import CheckoutGateway, PaymentProcessorError, PaymentTransportError
from application.services.base import BaseOrchestrator
from application.services.error_translator import ErrorTranslator
from core.logging_config import get_logger
from core.settings import GatewayConfig
from domain.payment.entity import Order, to_minor_units


logger = get_logger(__name__)


def build_checkout_payload(order: Order, success_url: str, failure_url: str) -> dict[str, Any]:
    items = [
        {
            "name": item.name,
            "quantity": item.quantity,
            "code": str(item.product_id),
            "amount": {"value": float(item.unit_price)},
            "totalAmount": {"value": float(item.subtotal)},
        }
        for item in order.items
    ]
    return {
        "totalAmount": {
            "value": to_minor_units(order.total),
            "currency": order.currency,
        },
        "buyer": {
            "firstName": order.billing_first_name,
            "lastName": order.billing_last_name,
            "contact": {
                "phone": order.billing_phone,
                "email": order.billing_email,
            },
            "billing_address": {
                "line1": order.billing_address_1,
                "line2": order.billing_address_2,
                "city": order.billing_city,
                "state": order.billing_state,
                "zipCode": order.billing_postcode,
                "countryCode": order.billing_country,
            },
        },
        "items": items,
        "redirectUrl": {
            "success": success_url,
            "failure": failure_url,
            "cancel": failure_url,
        },
        "requestReferenceNumber": str(order.id),
    }


class CheckoutOrchestrator(BaseOrchestrator):
    def __init__(
        self,
        *,
        gateway: CheckoutGateway,
        config: GatewayConfig,
        settlement: OrderSettlementPort,
        translator: Optional[ErrorTranslator] = None,
    ) -> None:
        super().__init__(config=config, settlement=settlement, translator=translator)
        self.gateway = gateway

    async def create_checkout(self, order: Order, success_url: str, failure_url: str) -> Optional[PaymentResult]:
        payload = build_checkout_payload(order, success_url, failure_url)
        try:
            session = await self.gateway.create_checkout(payload)
        except PaymentProcessorError as exc:
            self._report_rejection(order, exc)
            return None
        except PaymentTransportError as exc:
            self._report_transport_failure(exc)
            return None

        logger.info("checkout_created", order_id=order.id, checkout_id=session.checkout_id)
        return PaymentResult(redirect=session.redirect_url)
