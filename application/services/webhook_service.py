"""
Checkout webhook reconciliation (PayMaya).

Callbacks arrive independently of the customer's redirect. Each one is
matched to an order by its reference number and settles it only for a
completed checkout with a successful payment. A callback for an unknown
order is acknowledged and dropped.
"""
from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from application.dtos.payments import CheckoutWebhookEvent, WebhookOutcome, WebhookRequest
from application.ports.order_settlement import OrderLookup, OrderSettlementPort
from application.ports.payment_gateway import CheckoutGateway, PaymentProcessorError, PaymentTransportError
from core.logging_config import get_logger


logger = get_logger(__name__)

ROUTE_PARAM = "wc-api"
CHECKOUT_COMPLETED = "COMPLETED"
PAYMENT_SUCCESS = "PAYMENT_SUCCESS"


class WebhookReconciler:
    def __init__(
        self,
        *,
        orders: OrderLookup,
        settlement: OrderSettlementPort,
        route: str,
        gateway: Optional[CheckoutGateway] = None,
        events: tuple[str, ...] = ("CHECKOUT_SUCCESS", "CHECKOUT_FAILURE", "CHECKOUT_DROPOUT"),
    ) -> None:
        self.orders = orders
        self.settlement = settlement
        self.route = route
        self.gateway = gateway
        self.events = events

    async def handle_callback(self, request: WebhookRequest) -> WebhookOutcome:
        if request.method.upper() != "POST" or request.query.get(ROUTE_PARAM) != self.route:
            return WebhookOutcome(status_code=400)

        try:
            event = CheckoutWebhookEvent.model_validate_json(request.body or b"")
        except ValidationError as exc:
            logger.warning("webhook_body_invalid", error_count=exc.error_count())
            return WebhookOutcome(status_code=400)

        reference = event.reference_number
        order = await self.orders.get_order(reference) if reference else None
        if order is None:
            self.settlement.log("info", f"No transaction found with reference number {reference}")
            return WebhookOutcome(status_code=204, event_id=event.id)

        outcome = WebhookOutcome(status_code=200, event_id=event.id)
        if event.status == CHECKOUT_COMPLETED and event.payment_status == PAYMENT_SUCCESS:
            if order.is_paid:
                self.settlement.log("info", f"Order {order.id} already settled, skipping checkout {event.id}")
            else:
                await self.settlement.mark_paid(order, event.transaction_reference_number)
                outcome.settled = True
        else:
            self.settlement.log(
                "error",
                f"Failed to complete order because checkout is {event.status} and  payment is {event.payment_status}",
            )

        self.settlement.log("info", f"Webhook processing for checkout ID {event.id}")
        return outcome

    async def register_webhooks(self, callback_url: str) -> list[str]:
        """Replace every registered checkout webhook with ones pointing at callback_url.

        Returns the error messages collected along the way.
        """
        if self.gateway is None:
            raise RuntimeError("Webhook registration requires a checkout gateway")

        errors: list[str] = []
        try:
            existing = await self.gateway.list_webhooks()
        except (PaymentProcessorError, PaymentTransportError) as exc:
            errors.append(exc.message)
            existing = []

        for webhook in existing:
            try:
                await self.gateway.delete_webhook(str(webhook.get("id")))
            except (PaymentProcessorError, PaymentTransportError) as exc:
                errors.append(exc.message)

        for name in self.events:
            try:
                await self.gateway.create_webhook(name, callback_url)
            except (PaymentProcessorError, PaymentTransportError) as exc:
                errors.append(exc.message)

        logger.info("webhooks_registered", callback_url=callback_url, events=list(self.events), errors=len(errors))
        return errors
