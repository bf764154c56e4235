import pytest

from application.dtos.payments import ProcessorError
from application.ports.payment_gateway import PaymentProcessorError, PaymentTransportError
from application.services.payment_method_service import PaymentMethodCreator
from domain.common.exceptions import UnsupportedPaymentMethodException


@pytest.mark.parametrize(
    "tag, wire_type",
    [
        ("paymongo_paymaya", "paymaya"),
        ("paymongo_atome", "atome"),
        ("paymongo_bpi", "dob"),
        ("paymongo_billease", "billease"),
    ],
)
def test_method_tag_resolves_to_wire_type(tag, wire_type, processor, gateway_config, settlement):
    creator = PaymentMethodCreator(tag, processor=processor, config=gateway_config, settlement=settlement)
    assert creator.wire_type == wire_type


def test_unknown_method_tag_fails_fast(processor, gateway_config, settlement):
    with pytest.raises(UnsupportedPaymentMethodException):
        PaymentMethodCreator("paymongo_bitcoin", processor=processor, config=gateway_config, settlement=settlement)


@pytest.mark.asyncio
async def test_creates_method_with_billing_and_details(order, processor, gateway_config, settlement):
    creator = PaymentMethodCreator("paymongo_bpi", processor=processor, config=gateway_config, settlement=settlement)

    method = await creator.create_payment_method(order, lambda o: {"bank_code": "bpi"})

    assert method.id == "pm_1"
    name, (method_type, details, billing) = processor.calls[0]
    assert name == "create_payment_method"
    assert method_type == "dob"
    assert details == {"bank_code": "bpi"}
    assert billing.name == "Juan Dela Cruz"
    assert settlement.notices == []


@pytest.mark.asyncio
async def test_details_omitted_without_callback(order, processor, gateway_config, settlement):
    creator = PaymentMethodCreator("paymongo_paymaya", processor=processor, config=gateway_config, settlement=settlement)
    await creator.create_payment_method(order)
    assert processor.calls[0][1][1] is None


@pytest.mark.asyncio
async def test_rejection_logs_once_and_notifies_each_error(order, processor, gateway_config, settlement):
    processor.create_payment_method_result = PaymentProcessorError(
        [ProcessorError(detail="some error")], provider="fake", status_code=400
    )
    creator = PaymentMethodCreator("paymongo_paymaya", processor=processor, config=gateway_config, settlement=settlement)

    result = await creator.create_payment_method(order)

    assert result is None
    assert settlement.logs == [("error", "[Processing Payment] Order ID: 1001 - Response: some error")]
    assert settlement.notices == [("error", "some error")]


@pytest.mark.asyncio
async def test_multiple_errors_are_joined_in_one_log_line(order, processor, gateway_config, settlement):
    processor.create_payment_method_result = PaymentProcessorError(
        [ProcessorError(detail="first"), ProcessorError(detail="second")], provider="fake"
    )
    creator = PaymentMethodCreator("paymongo_atome", processor=processor, config=gateway_config, settlement=settlement)

    assert await creator.create_payment_method(order) is None
    assert settlement.logs == [("error", "[Processing Payment] Order ID: 1001 - Response: first,second")]
    assert settlement.notice_messages == ["first", "second"]


@pytest.mark.asyncio
async def test_transport_failure_becomes_connection_notice(order, processor, gateway_config, settlement):
    processor.create_payment_method_result = PaymentTransportError("boom", provider="fake", body="<html>")
    creator = PaymentMethodCreator("paymongo_atome", processor=processor, config=gateway_config, settlement=settlement)

    assert await creator.create_payment_method(order) is None
    assert settlement.notice_messages == ["Connection error. Check logs."]
    assert settlement.logs == [("error", "[Processing Payment] Response error <html>")]
