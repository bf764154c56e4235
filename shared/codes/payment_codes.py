"""
Payment specific codes, method-type table and message tables.
"""
from __future__ import annotations

from enum import IntEnum


class PaymentCode(IntEnum):
    # Generic success
    SUCCESS = 0

    # Provider/Network errors (6xxxx)
    PROVIDER_ERROR = 60000
    PROVIDER_RECOVERABLE = 60001
    TRANSPORT_ERROR = 60003


# Checkout method tag -> PayMongo payment method wire type
PAYMENT_METHOD_TYPES = {
    "paymongo_paymaya": "paymaya",
    "paymongo_atome": "atome",
    "paymongo_bpi": "dob",
    "paymongo_billease": "billease",
}

# Checkout method tag -> PayMongo source type (redirect e-wallets)
EWALLET_SOURCE_TYPES = {
    "paymongo_gcash": "gcash",
    "paymongo_grab_pay": "grab_pay",
}

# Domain event fired once an intent settles an order
SUCCESSFUL_PAYMENT_EVENT = "cynder_paymongo_successful_payment"

# User-facing templates
USER_ERRORS = {
    "generic_payment_error": (
        "Your payment did not proceed due to an error. "
        "Please try again or contact the merchant and/or site administrator."
    ),
    "generic_user_error": "An unknown error occured. Please contact your site administrator.",
    "generic_log_error": "Unknown error occured. (Error Code: {})",
}

# Log templates keyed by internal code
LOG_ERRORS = {
    "PI001": "No payment method ID found while processing payment for order ID {}.",
    "PI002": "No payment intent ID found while processing payment for order ID {}.",
    "PI003": "Response payload from Paymongo API for endpoint {}: {}",
}

# Internal code -> user template key
ERROR_USER_TEMPLATE = {
    "PI001": "generic_payment_error",
    "PI002": "generic_payment_error",
}

# (processor error code, source attribute) -> notice
FIELD_ERROR_MESSAGES = {
    ("parameter_required", "amount"): "Amount is required",
    ("parameter_required", "currency"): "Currency is required",
    ("parameter_below_minimum", "amount"): "Amount should be greater than 100",
}

MINIMUM_AMOUNT_MESSAGE = "Amount cannot be less than P100.00"
CONNECTION_ERROR_MESSAGE = "Connection error. Check logs."
RETRY_PAYMENT_MESSAGE = "Please try again."
