"""
Payment intent orchestration.

Drives attach-method -> inspect status -> branch -> settle for intent
based methods (cards with 3-D Secure, e-wallets and BNPL attached as
payment methods). Every processor failure is turned into queued notices;
nothing raised by the processor escapes these methods.
"""
from __future__ import annotations

from typing import Any, Optional

from application.dtos.payments import IntentCreated, PaymentIntent, PaymentResult
from application.ports.order_settlement import OrderSettlementPort
from application.ports.payment_gateway import PaymentProcessor, PaymentProcessorError, PaymentTransportError
from application.services.base import BaseOrchestrator
from application.services.error_translator import ErrorTranslator
from core.i18n import t
from core.logging_config import get_logger
from core.settings import GatewayConfig
from domain.payment.entity import Order, to_minor_units
from shared.codes.payment_codes import RETRY_PAYMENT_MESSAGE, SUCCESSFUL_PAYMENT_EVENT


logger = get_logger(__name__)

INTENT_ID_KEY = "payment_intent_id"

SUCCEEDED = "succeeded"
AWAITING_NEXT_ACTION = "awaiting_next_action"
AWAITING_PAYMENT_METHOD = "awaiting_payment_method"


class PaymentIntentOrchestrator(BaseOrchestrator):
    def __init__(
        self,
        *,
        processor: PaymentProcessor,
        config: GatewayConfig,
        settlement: OrderSettlementPort,
        translator: Optional[ErrorTranslator] = None,
        allowed_methods: tuple[str, ...] = ("card",),
    ) -> None:
        super().__init__(config=config, settlement=settlement, translator=translator)
        self.processor = processor
        self.allowed_methods = allowed_methods

    async def create_payment_intent(self, order: Order) -> Optional[IntentCreated]:
        """Open an intent for the order total and remember its id on the order."""
        try:
            intent = await self.processor.create_payment_intent(
                to_minor_units(order.total),
                order.currency,
                order.order_key,
                list(self.allowed_methods),
            )
        except PaymentProcessorError as exc:
            self._report_rejection(order, exc)
            return None
        except PaymentTransportError as exc:
            self._report_transport_failure(exc)
            return None

        self._debug_response("Create payment intent response", intent)

        if intent.status != AWAITING_PAYMENT_METHOD:
            self._report_malformed(order, "payment_intents", intent)
            return None

        order.set_meta(INTENT_ID_KEY, intent.id)
        await self.settlement.save(order)
        logger.info("payment_intent_created", order_id=order.id, intent_id=intent.id)
        return IntentCreated(payment_intent_id=intent.id, payment_client_key=intent.client_key)

    async def process_payment(
        self,
        order: Order,
        payment_method_id: Optional[str],
        gateway_return_url: str,
        final_return_url: str,
        send_invoice: bool = False,
    ) -> Optional[PaymentResult]:
        """Attach the method to the stored intent and act on the resulting status.

        Returns None when the attempt was aborted; the reasons are queued
        as notices on the settlement port.
        """
        if not payment_method_id:
            self._reject_precondition(order, "PI001")
            return None

        intent_id = order.get_meta(INTENT_ID_KEY)
        if not intent_id:
            self._reject_precondition(order, "PI002")
            return None

        self._track_process_payment(float(order.total), order.payment_method)

        try:
            intent = await self.processor.attach_payment_method(intent_id, payment_method_id, gateway_return_url)
        except PaymentProcessorError as exc:
            self._report_rejection(order, exc)
            return None
        except PaymentTransportError as exc:
            self._report_transport_failure(exc)
            return None

        self._debug_response("Attach payment method response", intent)

        if intent.status == SUCCEEDED:
            return await self._settle(order, intent, final_return_url, send_invoice)

        if intent.status == AWAITING_NEXT_ACTION:
            if not intent.redirect_url:
                self._report_malformed(order, f"payment_intents/{intent_id}/attach", intent)
                return None
            return PaymentResult(redirect=intent.redirect_url)

        # processing / awaiting_payment_method / failed: stay on the current page
        logger.info("payment_intent_unsettled", order_id=order.id, intent_id=intent.id, status=intent.status)
        return PaymentResult(redirect=None, pending=True)

    async def confirm_payment(
        self, order: Order, final_return_url: str, send_invoice: bool = False
    ) -> Optional[PaymentResult]:
        """Poll the stored intent and settle the order once it has succeeded."""
        intent_id = order.get_meta(INTENT_ID_KEY)
        if not intent_id:
            self._reject_precondition(order, "PI002")
            return None

        try:
            intent = await self.processor.retrieve_payment_intent(intent_id)
        except PaymentProcessorError as exc:
            self._report_rejection(order, exc)
            return None
        except PaymentTransportError as exc:
            self._report_transport_failure(exc)
            return None

        if intent.status == SUCCEEDED:
            return await self._settle(order, intent, final_return_url, send_invoice)

        self.settlement.notify("error", t(RETRY_PAYMENT_MESSAGE))
        return None

    async def _settle(
        self, order: Order, intent: PaymentIntent, final_return_url: str, send_invoice: bool
    ) -> Optional[PaymentResult]:
        if not intent.payments:
            self._report_malformed(order, f"payment_intents/{intent.id}", intent)
            return None

        # Only the first payment is authoritative
        payment: dict[str, Any] = intent.payments[0]
        payment_id = payment.get("id")
        minor = (payment.get("attributes") or {}).get("amount") or intent.amount
        amount = float(minor) / 100

        if order.is_paid:
            logger.info("order_already_settled", order_id=order.id, payment_id=payment_id)
            return PaymentResult(redirect=final_return_url)

        await self.settlement.mark_paid(order, payment_id, send_invoice)
        await self.settlement.empty_cart()
        self.settlement.track_event(
            "successful payment",
            {
                "payment_id": payment_id,
                "amount": amount,
                "payment_method": order.payment_method,
                "sandbox": "true" if self.config.test_mode else "false",
            },
        )
        self.settlement.emit_domain_event(SUCCESSFUL_PAYMENT_EVENT, payment)
        logger.info("payment_intent_settled", order_id=order.id, payment_id=payment_id, amount=amount)
        return PaymentResult(redirect=final_return_url)

    def _reject_precondition(self, order: Order, code: str) -> None:
        self.settlement.log("error", self.translator.log_message(code, [order.id]))
        self.settlement.notify("error", self.translator.user_message(code))

    def _report_malformed(self, order: Order, endpoint: str, intent: PaymentIntent) -> None:
        self.settlement.log("error", self.translator.log_message("PI003", [endpoint, intent.model_dump_json()]))
        self.settlement.notify("error", self.translator.user_message("PI003"))
