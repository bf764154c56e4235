import pytest

from application.dtos.payments import ProcessorError
from application.ports.payment_gateway import PaymentProcessorError, PaymentTransportError
from application.services.payment_intent_service import INTENT_ID_KEY, PaymentIntentOrchestrator
from domain.payment.entity import OrderStatus
from shared.codes.payment_codes import SUCCESSFUL_PAYMENT_EVENT, USER_ERRORS

from conftest import make_intent


FINAL_URL = "https://shop.example/checkout/order-received/1001"
GATEWAY_URL = "https://shop.example/?wc-api=cynder_paymongo_catch_redirect&order=1001"


@pytest.fixture
def orchestrator(processor, gateway_config, settlement):
    return PaymentIntentOrchestrator(processor=processor, config=gateway_config, settlement=settlement)


@pytest.fixture
def intent_order(order):
    order.set_meta(INTENT_ID_KEY, "pi_1")
    return order


def _succeeded(payments=None):
    return make_intent(
        "succeeded",
        amount=10000,
        payments=payments if payments is not None else [{"id": "4", "attributes": {"amount": "10000"}}, {"id": "5"}],
    )


@pytest.mark.asyncio
async def test_missing_payment_method_id_fails_without_network(orchestrator, intent_order, processor, settlement):
    result = await orchestrator.process_payment(intent_order, None, GATEWAY_URL, FINAL_URL)

    assert result is None
    assert processor.calls == []
    assert settlement.logs == [
        ("error", "No payment method ID found while processing payment for order ID 1001.")
    ]
    assert settlement.notice_messages == [f"{USER_ERRORS['generic_payment_error']} (Error Code: PI001)"]


@pytest.mark.asyncio
async def test_missing_stored_intent_fails_without_network(orchestrator, order, processor, settlement):
    result = await orchestrator.process_payment(order, "pm_1", GATEWAY_URL, FINAL_URL)

    assert result is None
    assert processor.calls == []
    assert settlement.logs == [
        ("error", "No payment intent ID found while processing payment for order ID 1001.")
    ]
    assert settlement.notice_messages == [f"{USER_ERRORS['generic_payment_error']} (Error Code: PI002)"]


@pytest.mark.asyncio
async def test_attaches_method_with_gateway_return_url(orchestrator, intent_order, processor):
    processor.attach_payment_method_result = make_intent("processing")

    await orchestrator.process_payment(intent_order, "pm_1", GATEWAY_URL, FINAL_URL)

    assert processor.calls == [("attach_payment_method", ("pi_1", "pm_1", GATEWAY_URL))]


@pytest.mark.asyncio
async def test_succeeded_settles_with_first_payment(orchestrator, intent_order, processor, settlement):
    processor.attach_payment_method_result = _succeeded()

    result = await orchestrator.process_payment(intent_order, "pm_1", GATEWAY_URL, FINAL_URL, send_invoice=True)

    assert result.redirect == FINAL_URL
    assert result.result == "success"
    assert settlement.paid == [("1001", "4", True)]
    assert intent_order.status == OrderStatus.PAID
    assert settlement.carts_emptied == 1
    name, props = settlement.tracked[-1]
    assert name == "successful payment"
    assert props["amount"] == 100.0
    assert props["payment_id"] == "4"
    assert props["sandbox"] == "true"
    assert settlement.events == [(SUCCESSFUL_PAYMENT_EVENT, {"id": "4", "attributes": {"amount": "10000"}})]


@pytest.mark.asyncio
async def test_process_payment_tracks_attempt(orchestrator, intent_order, processor, settlement):
    processor.attach_payment_method_result = make_intent("processing")

    await orchestrator.process_payment(intent_order, "pm_1", GATEWAY_URL, FINAL_URL)

    assert settlement.tracked[0] == (
        "process payment",
        {"amount": 100.0, "payment_method": "paymongo_paymaya", "sandbox": "true"},
    )


@pytest.mark.asyncio
async def test_succeeded_amount_falls_back_to_intent_amount(orchestrator, intent_order, processor, settlement):
    processor.attach_payment_method_result = _succeeded(payments=[{"id": "9"}])

    await orchestrator.process_payment(intent_order, "pm_1", GATEWAY_URL, FINAL_URL)

    assert settlement.tracked[-1][1]["amount"] == 100.0
    assert settlement.paid == [("1001", "9", False)]


@pytest.mark.asyncio
async def test_null_payment_amount_falls_back_to_intent_amount(orchestrator, intent_order, processor, settlement):
    processor.attach_payment_method_result = _succeeded(payments=[{"id": "7", "attributes": {"amount": None}}])

    await orchestrator.process_payment(intent_order, "pm_1", GATEWAY_URL, FINAL_URL)

    assert settlement.tracked[-1][1]["amount"] == 100.0
    assert settlement.paid == [("1001", "7", False)]


@pytest.mark.asyncio
async def test_succeeded_without_payments_is_malformed(orchestrator, intent_order, processor, settlement):
    processor.attach_payment_method_result = _succeeded(payments=[])

    result = await orchestrator.process_payment(intent_order, "pm_1", GATEWAY_URL, FINAL_URL)

    assert result is None
    assert settlement.paid == []
    level, line = settlement.logs[-1]
    assert level == "error"
    assert line.startswith("Response payload from Paymongo API for endpoint payment_intents/pi_1:")


@pytest.mark.asyncio
async def test_already_paid_order_is_not_settled_again(orchestrator, intent_order, processor, settlement):
    intent_order.mark_paid("earlier")
    processor.attach_payment_method_result = _succeeded()

    result = await orchestrator.process_payment(intent_order, "pm_1", GATEWAY_URL, FINAL_URL)

    assert result.redirect == FINAL_URL
    assert settlement.paid == []
    assert settlement.events == []
    assert intent_order.transaction_id == "earlier"


@pytest.mark.asyncio
async def test_awaiting_next_action_returns_processor_redirect(orchestrator, intent_order, processor, settlement):
    processor.attach_payment_method_result = make_intent(
        "awaiting_next_action", next_action={"type": "redirect", "redirect": {"url": "https://proc/x"}}
    )

    result = await orchestrator.process_payment(intent_order, "pm_1", GATEWAY_URL, FINAL_URL)

    assert result.redirect == "https://proc/x"
    assert settlement.paid == []
    assert intent_order.status == OrderStatus.PENDING


@pytest.mark.asyncio
async def test_awaiting_next_action_without_url_is_malformed(orchestrator, intent_order, processor, settlement):
    processor.attach_payment_method_result = make_intent("awaiting_next_action")

    assert await orchestrator.process_payment(intent_order, "pm_1", GATEWAY_URL, FINAL_URL) is None
    assert settlement.notice_messages == [f"{USER_ERRORS['generic_user_error']} (Error Code: PI003)"]


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["processing", "awaiting_payment_method", "failed"])
async def test_other_statuses_stay_put(orchestrator, intent_order, processor, settlement, status):
    processor.attach_payment_method_result = make_intent(status)

    result = await orchestrator.process_payment(intent_order, "pm_1", GATEWAY_URL, FINAL_URL)

    assert result.redirect is None
    assert result.pending is True
    assert settlement.paid == []
    assert settlement.notices == []


@pytest.mark.asyncio
async def test_structured_rejection_is_translated(orchestrator, intent_order, processor, settlement):
    processor.attach_payment_method_result = PaymentProcessorError(
        [ProcessorError(detail="some error")], provider="fake"
    )

    result = await orchestrator.process_payment(intent_order, "pm_1", GATEWAY_URL, FINAL_URL)

    assert result is None
    assert settlement.logs == [("error", "[Processing Payment] Order ID: 1001 - Response: some error")]
    assert settlement.notice_messages == ["some error"]


@pytest.mark.asyncio
async def test_transport_failure_is_reported(orchestrator, intent_order, processor, settlement):
    processor.attach_payment_method_result = PaymentTransportError("timeout", provider="fake")

    assert await orchestrator.process_payment(intent_order, "pm_1", GATEWAY_URL, FINAL_URL) is None
    assert settlement.notice_messages == ["Connection error. Check logs."]


@pytest.mark.asyncio
async def test_debug_mode_logs_raw_response(processor, gateway_config, settlement, intent_order):
    debug_config = gateway_config.model_copy(update={"debug_mode": True})
    orchestrator = PaymentIntentOrchestrator(processor=processor, config=debug_config, settlement=settlement)
    processor.attach_payment_method_result = make_intent("processing")

    await orchestrator.process_payment(intent_order, "pm_1", GATEWAY_URL, FINAL_URL)

    assert any(
        level == "info" and line.startswith("[Processing Payment] Attach payment method response")
        for level, line in settlement.logs
    )


@pytest.mark.asyncio
async def test_create_intent_stores_id_on_order(orchestrator, order, processor, settlement):
    processor.create_payment_intent_result = make_intent("awaiting_payment_method", client_key="pi_1_client")

    created = await orchestrator.create_payment_intent(order)

    assert created.payment_intent_id == "pi_1"
    assert created.payment_client_key == "pi_1_client"
    assert order.get_meta(INTENT_ID_KEY) == "pi_1"
    assert settlement.saved == ["1001"]
    assert processor.calls[0] == ("create_payment_intent", (10000, "PHP", "wc_order_abc", ["card"]))


@pytest.mark.asyncio
async def test_create_intent_with_unexpected_status_is_malformed(orchestrator, order, processor, settlement):
    processor.create_payment_intent_result = make_intent("succeeded")

    assert await orchestrator.create_payment_intent(order) is None
    assert order.get_meta(INTENT_ID_KEY) is None
    assert settlement.logs[-1][1].startswith("Response payload from Paymongo API for endpoint payment_intents:")


@pytest.mark.asyncio
async def test_confirm_settles_succeeded_intent(orchestrator, intent_order, processor, settlement):
    processor.retrieve_payment_intent_result = _succeeded()

    result = await orchestrator.confirm_payment(intent_order, FINAL_URL)

    assert result.redirect == FINAL_URL
    assert processor.calls == [("retrieve_payment_intent", ("pi_1",))]
    assert settlement.paid == [("1001", "4", False)]


@pytest.mark.asyncio
async def test_confirm_unsettled_intent_asks_to_retry(orchestrator, intent_order, processor, settlement):
    processor.retrieve_payment_intent_result = make_intent("awaiting_payment_method")

    assert await orchestrator.confirm_payment(intent_order, FINAL_URL) is None
    assert settlement.notice_messages == ["Please try again."]
    assert settlement.paid == []


@pytest.mark.asyncio
async def test_confirm_without_stored_intent(orchestrator, order, processor, settlement):
    assert await orchestrator.confirm_payment(order, FINAL_URL) is None
    assert processor.calls == []
