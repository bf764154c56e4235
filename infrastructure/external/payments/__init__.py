"""
Factories for payment processor clients.
"""
from __future__ import annotations

from typing import Optional

from application.ports.payment_gateway import CheckoutGateway, PaymentProcessor
from core.settings import GatewayConfig, PaymentSettings


def get_payment_processor(config: GatewayConfig, settings: PaymentSettings) -> PaymentProcessor:
    from .paymongo_client import PayMongoClient
    return PayMongoClient(config, settings)


def get_checkout_gateway(settings: PaymentSettings) -> Optional[CheckoutGateway]:
    """PayMaya gateway, or None when its keys are not configured."""
    if not settings.paymaya.public_key or not settings.paymaya.secret_key:
        return None
    from .paymaya_client import PayMayaClient
    return PayMayaClient(settings)
