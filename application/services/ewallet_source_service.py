"""
E-wallet source orchestration (redirect based wallets such as GCash and
GrabPay): create a source, inspect its status, hand back the wallet's
checkout URL or the processor's field errors as notices.
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode

from application.dtos.payments import PaymentResult, Source
from application.ports.order_settlement import OrderSettlementPort
from application.ports.payment_gateway import PaymentProcessor, PaymentTransportError
from application.services.base import LOG_PREFIX, BaseOrchestrator
from application.services.billing import to_billing_object
from application.services.error_translator import ErrorTranslator
from core.logging_config import get_logger
from core.settings import GatewayConfig
from domain.payment.entity import Order
from shared.codes.payment_codes import EWALLET_SOURCE_TYPES


logger = get_logger(__name__)

SOURCE_ID_KEY = "source_id"


def build_source_redirect_urls(config: GatewayConfig, order_id: str) -> tuple[str, str]:
    """Success and failure return URLs for a source, tagged with provenance."""

    def _url(status: str) -> str:
        query = urlencode(
            {
                "wc-api": config.source_redirect_route,
                "order": order_id,
                "status": status,
                **config.provenance,
            }
        )
        return f"{config.site_url}/?{query}"

    return _url("success"), _url("failed")


class EwalletSourceOrchestrator(BaseOrchestrator):
    def __init__(
        self,
        *,
        processor: PaymentProcessor,
        config: GatewayConfig,
        settlement: OrderSettlementPort,
        translator: Optional[ErrorTranslator] = None,
    ) -> None:
        super().__init__(config=config, settlement=settlement, translator=translator)
        self.processor = processor

    async def create_source(
        self,
        order: Order,
        ewallet_type: str,
        success_url: Optional[str] = None,
        fail_url: Optional[str] = None,
    ) -> Optional[PaymentResult]:
        """Create a source for the order and return the wallet checkout redirect.

        Returns None when notices were queued instead.
        """
        if order.is_paid:
            self.settlement.log("error", f"{LOG_PREFIX} Order ID: {order.id} - Response: order is already paid")
            self.settlement.notify("error", self.translator.user_message("PI003"))
            return None

        source_type = EWALLET_SOURCE_TYPES.get(ewallet_type, ewallet_type)
        if success_url is None or fail_url is None:
            default_success, default_fail = build_source_redirect_urls(self.config, order.id)
            success_url = success_url or default_success
            fail_url = fail_url or default_fail

        billing = to_billing_object(order)
        self._track_process_payment(float(order.total), order.payment_method)

        try:
            source = await self.processor.create_source(
                order.total,
                source_type,
                success_url,
                fail_url,
                billing,
                self.config.provenance,
            )
        except PaymentTransportError as exc:
            self._report_transport_failure(exc)
            return None

        self._debug_response("Create source response", source)

        if source.status == "pending" and source.redirect.checkout_url:
            order.set_meta(SOURCE_ID_KEY, source.id)
            order.mark_pending()
            await self.settlement.save(order)
            logger.info("source_created", order_id=order.id, source_id=source.id, source_type=source_type)
            return PaymentResult(redirect=source.redirect.checkout_url)

        self._report_source_errors(order, source)
        return None

    def _report_source_errors(self, order: Order, source: Source) -> None:
        if not source.errors:
            self.settlement.log("error", self.translator.log_message("PI003", ["sources", source.model_dump_json()]))
            self.settlement.notify("error", self.translator.user_message("PI003"))
            return
        for error in source.errors:
            self.settlement.notify("error", self.translator.source_error_message(error))
        logger.info("source_rejected", order_id=order.id, codes=[e.code for e in source.errors])
