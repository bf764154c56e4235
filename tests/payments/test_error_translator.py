import pytest

from application.dtos.payments import ErrorSource, ProcessorError
from application.services.error_translator import (
    ErrorTranslator,
    lookup_log_template,
    lookup_user_template,
)
from shared.codes.payment_codes import USER_ERRORS


translator = ErrorTranslator()


@pytest.mark.parametrize("code", ["ZZ999", "", "PI003", "not-a-code"])
def test_unknown_user_code_falls_back_to_generic_with_code(code):
    message = translator.user_message(code)
    assert message.startswith(USER_ERRORS["generic_user_error"])
    assert f"(Error Code: {code})" in message


def test_known_user_code_uses_mapped_template():
    message = translator.user_message("PI001")
    assert message == f"{USER_ERRORS['generic_payment_error']} (Error Code: PI001)"


def test_log_message_formats_known_template():
    assert translator.log_message("PI002", ["1001"]) == (
        "No payment intent ID found while processing payment for order ID 1001."
    )


def test_log_message_with_missing_args_uses_generic_template():
    lookup = lookup_log_template("PI003", ["payment_intents"])
    assert lookup.found is False
    assert translator.log_message("PI003", ["payment_intents"]) == "Unknown error occured. (Error Code: PI003)"


def test_log_message_unknown_code_keeps_raw_code():
    assert translator.log_message("XX1") == "Unknown error occured. (Error Code: XX1)"


def test_user_lookup_is_tagged():
    assert lookup_user_template("PI001").found is True
    assert lookup_user_template("nope").found is False


def test_field_errors_get_fixed_messages():
    required = ProcessorError(code="parameter_required", detail="x", source=ErrorSource(attribute="amount"))
    below = ProcessorError(code="parameter_below_minimum", detail="x", source=ErrorSource(attribute="amount"))
    currency = ProcessorError(code="parameter_required", detail="x", source=ErrorSource(attribute="currency"))

    assert translator.processor_error_message(required) == "Amount is required"
    assert translator.processor_error_message(below) == "Amount should be greater than 100"
    assert translator.processor_error_message(currency) == "Currency is required"


def test_processor_error_falls_back_to_detail_then_generic():
    assert translator.processor_error_message(ProcessorError(detail="some error")) == "some error"
    assert translator.processor_error_message(ProcessorError(code="weird")) == USER_ERRORS["generic_user_error"]


def test_source_minimum_amount_message_replaces_detail():
    error = ProcessorError(code="parameter_below_minimum", detail="amount must be at least 10000")
    assert translator.source_error_message(error) == "Amount cannot be less than P100.00"
    assert translator.source_error_message(ProcessorError(code="other", detail="raw")) == "raw"
