"""
API dependencies: the payment services are composed once at startup and
kept on app.state; route handlers pull them from there.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from fastapi import Depends, HTTPException, Request, status

from application.ports.order_settlement import OrderLookup, OrderSettlementPort
from application.ports.payment_gateway import CheckoutGateway, PaymentProcessor
from application.services.checkout_service import CheckoutOrchestrator
from application.services.error_translator import ErrorTranslator
from application.services.ewallet_source_service import EwalletSourceOrchestrator
from application.services.payment_intent_service import PaymentIntentOrchestrator
from application.services.payment_method_service import PaymentMethodCreator
from application.services.webhook_service import WebhookReconciler
from core.settings import GatewayConfig, WebhookSettings
from domain.common.exceptions import OrderNotFoundException, UnsupportedPaymentMethodException
from domain.payment.entity import Order
from shared.codes.payment_codes import PAYMENT_METHOD_TYPES


@dataclass
class PaymentServices:
    config: GatewayConfig
    orders: OrderLookup
    settlement: OrderSettlementPort
    intents: PaymentIntentOrchestrator
    sources: EwalletSourceOrchestrator
    webhooks: WebhookReconciler
    method_creators: dict[str, PaymentMethodCreator]
    checkout: Optional[CheckoutOrchestrator] = None
    webhook_callback_url: Optional[str] = None
    # Clients closed on shutdown
    closables: list[Any] = field(default_factory=list)

    def method_creator(self, method_tag: str) -> PaymentMethodCreator:
        creator = self.method_creators.get(method_tag)
        if creator is None:
            raise UnsupportedPaymentMethodException(method_tag)
        return creator

    async def aclose(self) -> None:
        for client in self.closables:
            await client.aclose()


def build_payment_services(
    config: GatewayConfig,
    *,
    processor: PaymentProcessor,
    orders: OrderLookup,
    settlement: OrderSettlementPort,
    gateway: Optional[CheckoutGateway] = None,
    webhook: Optional[WebhookSettings] = None,
) -> PaymentServices:
    """Wire every orchestrator against one config, processor and settlement port."""
    webhook = webhook or WebhookSettings()
    translator = ErrorTranslator()
    common = {"config": config, "settlement": settlement, "translator": translator}

    return PaymentServices(
        config=config,
        orders=orders,
        settlement=settlement,
        intents=PaymentIntentOrchestrator(processor=processor, **common),
        sources=EwalletSourceOrchestrator(processor=processor, **common),
        webhooks=WebhookReconciler(
            orders=orders,
            settlement=settlement,
            route=webhook.route,
            gateway=gateway,
            events=tuple(webhook.events),
        ),
        method_creators={
            tag: PaymentMethodCreator(tag, processor=processor, **common) for tag in PAYMENT_METHOD_TYPES
        },
        checkout=CheckoutOrchestrator(gateway=gateway, **common) if gateway is not None else None,
        webhook_callback_url=webhook.callback_url,
        closables=[c for c in (processor, gateway) if c is not None and hasattr(c, "aclose")],
    )


def get_payment_services(request: Request) -> PaymentServices:
    services = getattr(request.app.state, "payments", None)
    if services is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Payment services are not configured",
        )
    return services


async def get_order(order_id: str, services: PaymentServices = Depends(get_payment_services)) -> Order:
    order = await services.orders.get_order(order_id)
    if order is None:
        raise OrderNotFoundException(order_id)
    return order
