"""
Payment processor ports (application/ports) exposing replaceable protocols.

Application depends on these Protocols and on the exceptions they raise;
infrastructure implements the adapters.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Protocol, runtime_checkable

from application.dtos.payments import (
    BillingObject,
    CheckoutSession,
    PaymentIntent,
    PaymentMethod,
    ProcessorError,
    Source,
)
from domain.common.exceptions import BusinessException
from shared.codes.payment_codes import PaymentCode


class PaymentProcessorError(BusinessException):
    """Structured rejection: the processor answered with field/code errors."""

    def __init__(self, errors: list[ProcessorError], *, provider: str, status_code: Optional[int] = None):
        self.errors = errors
        self.status_code = status_code
        super().__init__(
            code=PaymentCode.PROVIDER_ERROR,
            message=",".join(self.format_errors()) or "Payment provider error",
            error_type="PaymentProcessorError",
            details={"provider": provider, "status_code": status_code, "codes": [e.code for e in errors]},
        )

    def format_errors(self) -> list[str]:
        return [e.detail or e.code or "" for e in self.errors]


class PaymentTransportError(BusinessException):
    """The call itself failed: unreachable processor or unreadable response."""

    def __init__(self, message: str, *, provider: str, body: Optional[str] = None, status_code: Optional[int] = None):
        self.body = body
        self.status_code = status_code
        super().__init__(
            code=PaymentCode.TRANSPORT_ERROR,
            message=message,
            error_type="PaymentTransportError",
            details={"provider": provider, "status_code": status_code},
        )


@runtime_checkable
class PaymentProcessor(Protocol):
    """PayMongo-style processor: payment methods, intents and sources.

    Methods raise PaymentProcessorError for structured rejections and
    PaymentTransportError when the call fails. `create_source` instead
    returns error lists inside the Source.
    """

    provider: str

    async def create_payment_method(
        self, method_type: str, details: Optional[dict[str, Any]], billing: BillingObject
    ) -> PaymentMethod: ...

    async def create_payment_intent(
        self, amount: int, currency: str, description: str, allowed_methods: list[str]
    ) -> PaymentIntent: ...

    async def retrieve_payment_intent(self, intent_id: str) -> PaymentIntent: ...

    async def attach_payment_method(self, intent_id: str, method_id: str, return_url: str) -> PaymentIntent: ...

    async def create_source(
        self,
        amount: Decimal,
        source_type: str,
        success_url: str,
        failed_url: str,
        billing: BillingObject,
        metadata: dict[str, str],
    ) -> Source: ...


@runtime_checkable
class CheckoutGateway(Protocol):
    """PayMaya-style hosted checkout with webhook management."""

    provider: str

    async def create_checkout(self, payload: dict[str, Any]) -> CheckoutSession: ...

    async def list_webhooks(self) -> list[dict[str, Any]]: ...

    async def delete_webhook(self, webhook_id: str) -> None: ...

    async def create_webhook(self, name: str, callback_url: str) -> dict[str, Any]: ...
