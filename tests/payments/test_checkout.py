import pytest

from application.dtos.payments import ProcessorError
from application.ports.payment_gateway import PaymentProcessorError, PaymentTransportError
from application.services.checkout_service import CheckoutOrchestrator, build_checkout_payload


def test_checkout_payload_shape(order):
    payload = build_checkout_payload(order, "https://ok", "https://ko")

    assert payload["totalAmount"] == {"value": 10000, "currency": "PHP"}
    assert payload["requestReferenceNumber"] == "1001"
    assert payload["buyer"]["firstName"] == "Juan"
    assert payload["buyer"]["contact"] == {"phone": "09171234567", "email": "juan@example.com"}
    assert payload["buyer"]["billing_address"]["zipCode"] == "1226"
    assert payload["items"] == [
        {
            "name": "Coffee",
            "quantity": 2,
            "code": "sku-1",
            "amount": {"value": 50.0},
            "totalAmount": {"value": 100.0},
        }
    ]
    assert payload["redirectUrl"] == {"success": "https://ok", "failure": "https://ko", "cancel": "https://ko"}


@pytest.mark.asyncio
async def test_create_checkout_returns_hosted_page(order, checkout_gateway, gateway_config, settlement):
    orchestrator = CheckoutOrchestrator(gateway=checkout_gateway, config=gateway_config, settlement=settlement)

    result = await orchestrator.create_checkout(order, "https://ok", "https://ko")

    assert result.redirect == "https://paymaya/chk_1"
    assert checkout_gateway.payloads[0]["requestReferenceNumber"] == "1001"


@pytest.mark.asyncio
async def test_create_checkout_rejection_becomes_notice(order, checkout_gateway, gateway_config, settlement):
    checkout_gateway.checkout_result = PaymentProcessorError(
        [ProcessorError(code="2553", detail="Missing/invalid parameters.")], provider="paymaya"
    )
    orchestrator = CheckoutOrchestrator(gateway=checkout_gateway, config=gateway_config, settlement=settlement)

    assert await orchestrator.create_checkout(order, "https://ok", "https://ko") is None
    assert settlement.notice_messages == ["Missing/invalid parameters."]


@pytest.mark.asyncio
async def test_create_checkout_transport_failure(order, checkout_gateway, gateway_config, settlement):
    checkout_gateway.checkout_result = PaymentTransportError("down", provider="paymaya")
    orchestrator = CheckoutOrchestrator(gateway=checkout_gateway, config=gateway_config, settlement=settlement)

    assert await orchestrator.create_checkout(order, "https://ok", "https://ko") is None
    assert settlement.notice_messages == ["Connection error. Check logs."]
