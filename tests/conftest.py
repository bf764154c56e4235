"""Pytest bootstrap configuration.

Settings are read at import time, so mandatory environment variables are
set before test collection. Shared fakes for the processor, the checkout
gateway and the settlement port live here.
"""
import os

# Keep imports from touching a real database file or live keys
os.environ.setdefault("DATABASE__URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("PAYMENT__TEST_MODE", "true")

from decimal import Decimal
from typing import Any, Optional

import pytest

from application.dtos.payments import CheckoutSession, PaymentIntent, PaymentMethod, Source
from core.settings import GatewayConfig
from domain.payment.entity import Order, OrderItem


class FakeProcessor:
    """In-memory PaymentProcessor; set `<method>_result` to a value or an exception."""

    provider = "fake"

    def __init__(self):
        self.calls: list[tuple[str, tuple]] = []
        self.create_payment_method_result: Any = PaymentMethod(id="pm_1", type="paymaya")
        self.create_payment_intent_result: Any = None
        self.retrieve_payment_intent_result: Any = None
        self.attach_payment_method_result: Any = None
        self.create_source_result: Any = Source()

    def _answer(self, name: str, *args):
        self.calls.append((name, args))
        result = getattr(self, f"{name}_result")
        if isinstance(result, Exception):
            raise result
        return result

    async def create_payment_method(self, method_type, details, billing):
        return self._answer("create_payment_method", method_type, details, billing)

    async def create_payment_intent(self, amount, currency, description, allowed_methods):
        return self._answer("create_payment_intent", amount, currency, description, allowed_methods)

    async def retrieve_payment_intent(self, intent_id):
        return self._answer("retrieve_payment_intent", intent_id)

    async def attach_payment_method(self, intent_id, method_id, return_url):
        return self._answer("attach_payment_method", intent_id, method_id, return_url)

    async def create_source(self, amount, source_type, success_url, failed_url, billing, metadata):
        return self._answer("create_source", amount, source_type, success_url, failed_url, billing, metadata)


class FakeCheckoutGateway:
    provider = "fake-checkout"

    def __init__(self):
        self.payloads: list[dict] = []
        self.webhooks: list[dict] = [{"id": "wh_old"}]
        self.deleted: list[str] = []
        self.created: list[tuple[str, str]] = []
        self.checkout_result: Any = CheckoutSession(checkout_id="chk_1", redirect_url="https://paymaya/chk_1")
        self.create_webhook_error: Optional[Exception] = None

    async def create_checkout(self, payload):
        self.payloads.append(payload)
        if isinstance(self.checkout_result, Exception):
            raise self.checkout_result
        return self.checkout_result

    async def list_webhooks(self):
        return list(self.webhooks)

    async def delete_webhook(self, webhook_id):
        self.deleted.append(webhook_id)

    async def create_webhook(self, name, callback_url):
        if self.create_webhook_error is not None:
            raise self.create_webhook_error
        self.created.append((name, callback_url))
        return {"id": f"wh_{name.lower()}", "name": name, "callbackUrl": callback_url}


class RecordingSettlement:
    """OrderSettlementPort and OrderLookup that records every interaction."""

    def __init__(self, orders: Optional[list[Order]] = None):
        self.orders = {o.id: o for o in (orders or [])}
        self.logs: list[tuple[str, str]] = []
        self.notices: list[tuple[str, str]] = []
        self.paid: list[tuple[str, Optional[str], bool]] = []
        self.saved: list[str] = []
        self.events: list[tuple[str, Any]] = []
        self.tracked: list[tuple[str, dict]] = []
        self.carts_emptied = 0

    async def get_order(self, order_id):
        return self.orders.get(order_id)

    async def mark_paid(self, order, payment_id, send_invoice=False):
        order.mark_paid(payment_id)
        self.paid.append((order.id, payment_id, send_invoice))

    async def empty_cart(self):
        self.carts_emptied += 1

    async def save(self, order):
        self.orders[order.id] = order
        self.saved.append(order.id)

    def log(self, level, message):
        self.logs.append((level, message))

    def notify(self, level, message):
        self.notices.append((level, message))

    def emit_domain_event(self, name, payload):
        self.events.append((name, payload))

    def track_event(self, name, properties):
        self.tracked.append((name, properties))

    @property
    def notice_messages(self) -> list[str]:
        return [message for _, message in self.notices]


def make_intent(status: str, **attributes) -> PaymentIntent:
    return PaymentIntent.from_resource({"id": "pi_1", "attributes": {"status": status, **attributes}})


@pytest.fixture
def gateway_config() -> GatewayConfig:
    return GatewayConfig(
        test_mode=True,
        debug_mode=False,
        public_key="pk_test",
        secret_key="sk_test",
        agent="cynder_woocommerce",
        version="1.0.0",
        site_url="https://shop.example",
        source_redirect_route="cynder_paymongo_catch_source_redirect",
    )


@pytest.fixture
def order() -> Order:
    return Order(
        id="1001",
        total=Decimal("100.00"),
        payment_method="paymongo_paymaya",
        order_key="wc_order_abc",
        billing_first_name="Juan",
        billing_last_name="Dela Cruz",
        billing_email="juan@example.com",
        billing_phone="09171234567",
        billing_address_1="1 Ayala Ave",
        billing_city="Makati",
        billing_state="Metro Manila",
        billing_postcode="1226",
        billing_country="PH",
        items=[
            OrderItem(
                name="Coffee",
                quantity=2,
                product_id="sku-1",
                unit_price=Decimal("50.00"),
                subtotal=Decimal("100.00"),
            )
        ],
    )


@pytest.fixture
def processor() -> FakeProcessor:
    return FakeProcessor()


@pytest.fixture
def checkout_gateway() -> FakeCheckoutGateway:
    return FakeCheckoutGateway()


@pytest.fixture
def settlement(order) -> RecordingSettlement:
    return RecordingSettlement([order])
