"""Domain-level business exceptions shared by domain and infrastructure.

The core layer only maps these to HTTP responses; the domain layer never
imports from core.
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode


class BusinessException(Exception):
    """Base business exception"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
        message_key: Optional[str] = None,
        format_params: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        self.message_key = message_key
        self.format_params = format_params
        super().__init__(self.message)


class OrderNotFoundException(BusinessException):
    def __init__(self, order_id: Optional[str] = None):
        details = {"order_id": order_id} if order_id else None
        super().__init__(
            code=BusinessCode.ORDER_NOT_FOUND,
            message="Order not found",
            error_type="OrderNotFound",
            details=details,
            message_key="order.not_found",
        )


class UnsupportedPaymentMethodException(BusinessException):
    """Raised for a method tag outside the fixed wire-type table.

    This is a wiring mistake, not a customer error.
    """

    def __init__(self, method_tag: str):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=f"Unsupported payment method: {method_tag}",
            error_type="UnsupportedPaymentMethod",
            details={"method_tag": method_tag},
            field="method_tag",
            message_key="payments.method.unsupported",
            format_params={"method_tag": method_tag},
        )


class PaymentNotProcessedException(BusinessException):
    """An orchestrator returned no result; notices explain why."""

    def __init__(self, order_id: str, notices: list[str]):
        super().__init__(
            code=BusinessCode.PAYMENT_NOT_PROCESSED,
            message="Payment was not processed",
            error_type="PaymentNotProcessed",
            details={"order_id": order_id, "notices": notices},
            message_key="payments.not_processed",
        )


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
        message_key: str | None = None,
        format_params: dict | None = None,
    ):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=message,
            error_type="DomainValidationError",
            details=details,
            field=field,
            message_key=message_key or "validation.domain",
            format_params=format_params,
        )
