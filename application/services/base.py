"""
Shared plumbing for the payment orchestrators: configuration, settlement
port, error translation and the rejection/notice reporting they all use.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel

from application.ports.order_settlement import OrderSettlementPort
from application.ports.payment_gateway import PaymentProcessorError, PaymentTransportError
from application.services.error_translator import ErrorTranslator
from core.i18n import t
from core.settings import GatewayConfig
from domain.payment.entity import Order
from shared.codes.payment_codes import CONNECTION_ERROR_MESSAGE


LOG_PREFIX = "[Processing Payment]"


class BaseOrchestrator:
    def __init__(
        self,
        *,
        config: GatewayConfig,
        settlement: OrderSettlementPort,
        translator: Optional[ErrorTranslator] = None,
    ) -> None:
        self.config = config
        self.settlement = settlement
        self.translator = translator or ErrorTranslator()

    def _debug_response(self, label: str, response: Any) -> None:
        if not self.config.debug_mode:
            return
        rendered = response.model_dump_json() if isinstance(response, BaseModel) else repr(response)
        self.settlement.log("info", f"{LOG_PREFIX} {label} {rendered}")

    def _report_rejection(self, order: Order, exc: PaymentProcessorError) -> None:
        """Translate each processor error, log them once, notify each."""
        messages = [self.translator.processor_error_message(error) for error in exc.errors]
        self.settlement.log("error", f"{LOG_PREFIX} Order ID: {order.id} - Response: {','.join(messages)}")
        for message in messages:
            self.settlement.notify("error", message)

    def _report_transport_failure(self, exc: PaymentTransportError) -> None:
        """Log the raw body for diagnostics and queue one generic notice."""
        self.settlement.log("error", f"{LOG_PREFIX} Response error {exc.body if exc.body is not None else exc.message}")
        self.settlement.notify("error", t(CONNECTION_ERROR_MESSAGE))

    def _track_process_payment(self, amount: float, payment_method: Optional[str]) -> None:
        self.settlement.track_event(
            "process payment",
            {
                "amount": amount,
                "payment_method": payment_method,
                "sandbox": "true" if self.config.test_mode else "false",
            },
        )
