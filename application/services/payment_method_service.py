"""
Payment method registration for intent-based methods (e-wallets, BNPL,
online banking).
"""
from __future__ import annotations

from typing import Any, Callable, Optional

from application.dtos.payments import PaymentMethod
from application.ports.order_settlement import OrderSettlementPort
from application.ports.payment_gateway import PaymentProcessor, PaymentProcessorError, PaymentTransportError
from application.services.base import BaseOrchestrator
from application.services.billing import to_billing_object
from application.services.error_translator import ErrorTranslator
from core.logging_config import get_logger
from core.settings import GatewayConfig
from domain.common.exceptions import UnsupportedPaymentMethodException
from domain.payment.entity import Order
from shared.codes.payment_codes import PAYMENT_METHOD_TYPES


logger = get_logger(__name__)

DetailCallback = Callable[[Order], Optional[dict[str, Any]]]


class PaymentMethodCreator(BaseOrchestrator):
    """Registers a processor payment method for one checkout method tag."""

    def __init__(
        self,
        method_tag: str,
        *,
        processor: PaymentProcessor,
        config: GatewayConfig,
        settlement: OrderSettlementPort,
        translator: Optional[ErrorTranslator] = None,
    ) -> None:
        if method_tag not in PAYMENT_METHOD_TYPES:
            raise UnsupportedPaymentMethodException(method_tag)
        super().__init__(config=config, settlement=settlement, translator=translator)
        self.method_tag = method_tag
        self.wire_type = PAYMENT_METHOD_TYPES[method_tag]
        self.processor = processor

    async def create_payment_method(
        self, order: Order, detail_callback: Optional[DetailCallback] = None
    ) -> Optional[PaymentMethod]:
        """Create the payment method; None means notices were queued."""
        details = detail_callback(order) if detail_callback is not None else None
        billing = to_billing_object(order)

        try:
            payment_method = await self.processor.create_payment_method(self.wire_type, details, billing)
        except PaymentProcessorError as exc:
            self._report_rejection(order, exc)
            return None
        except PaymentTransportError as exc:
            self._report_transport_failure(exc)
            return None

        self._debug_response("Payment method response", payment_method)
        logger.info("payment_method_created", order_id=order.id, method_type=self.wire_type)
        return payment_method
