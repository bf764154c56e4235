"""
Payment DTOs (Pydantic v2) used at application boundaries.

Processor objects are parsed from the JSON:API `data` resource the
processor returns (`{"id": ..., "attributes": {...}}`) and live for one
request only.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Literal
from pydantic import BaseModel, ConfigDict, Field


class BillingAddress(BaseModel):
    line1: Optional[str] = None
    line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None


class BillingObject(BaseModel):
    """Billing shape fixed by the processor contract."""
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    address: BillingAddress = Field(default_factory=BillingAddress)


class ErrorSource(BaseModel):
    pointer: Optional[str] = None
    attribute: Optional[str] = None


class ProcessorError(BaseModel):
    """One field/code level error reported by the processor."""
    code: Optional[str] = None
    detail: Optional[str] = None
    source: Optional[ErrorSource] = None

    @property
    def attribute(self) -> Optional[str]:
        return self.source.attribute if self.source else None


class PaymentMethod(BaseModel):
    id: str
    type: Optional[str] = None
    billing: Optional[dict[str, Any]] = None

    @classmethod
    def from_resource(cls, resource: dict[str, Any]) -> "PaymentMethod":
        attributes = resource.get("attributes") or {}
        return cls(id=str(resource.get("id")), type=attributes.get("type"), billing=attributes.get("billing"))


class RedirectInfo(BaseModel):
    url: Optional[str] = None
    return_url: Optional[str] = None


class NextAction(BaseModel):
    type: Optional[str] = None
    redirect: Optional[RedirectInfo] = None


class PaymentIntent(BaseModel):
    id: str
    amount: int = 0  # minor units
    currency: Optional[str] = None
    status: str
    client_key: Optional[str] = None
    payments: list[dict[str, Any]] = Field(default_factory=list)
    next_action: Optional[NextAction] = None

    @property
    def redirect_url(self) -> Optional[str]:
        if self.next_action and self.next_action.redirect:
            return self.next_action.redirect.url
        return None

    @classmethod
    def from_resource(cls, resource: dict[str, Any]) -> "PaymentIntent":
        attributes = resource.get("attributes") or {}
        return cls(
            id=str(resource.get("id")),
            amount=int(attributes.get("amount") or 0),
            currency=attributes.get("currency"),
            status=str(attributes.get("status") or ""),
            client_key=attributes.get("client_key"),
            payments=list(attributes.get("payments") or []),
            next_action=attributes.get("next_action"),
        )


class SourceRedirect(BaseModel):
    checkout_url: Optional[str] = None
    success: Optional[str] = None
    failed: Optional[str] = None


class Source(BaseModel):
    """Create-source response: either a pending source or an error list."""
    id: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    redirect: SourceRedirect = Field(default_factory=SourceRedirect)
    errors: list[ProcessorError] = Field(default_factory=list)

    @classmethod
    def from_response(cls, body: dict[str, Any]) -> "Source":
        resource = body.get("data") if isinstance(body.get("data"), dict) else body
        attributes = resource.get("attributes") or {}
        return cls(
            id=resource.get("id"),
            type=attributes.get("type"),
            status=attributes.get("status"),
            redirect=attributes.get("redirect") or {},
            errors=body.get("errors") or [],
        )


class CheckoutSession(BaseModel):
    checkout_id: Optional[str] = None
    redirect_url: str


class CheckoutWebhookEvent(BaseModel):
    """Checkout callback body posted by PayMaya."""
    id: Optional[str] = None
    reference_number: Optional[str] = Field(default=None, alias="requestReferenceNumber")
    status: Optional[str] = None
    payment_status: Optional[str] = Field(default=None, alias="paymentStatus")
    transaction_reference_number: Optional[str] = Field(default=None, alias="transactionReferenceNumber")

    # Reference numbers may arrive as JSON numbers
    model_config = ConfigDict(populate_by_name=True, extra="allow", coerce_numbers_to_str=True)


class PaymentResult(BaseModel):
    """Successful orchestrator outcome.

    `redirect` is None when the customer should stay on the current page
    (`pending` is then True).
    """
    result: Literal["success"] = "success"
    redirect: Optional[str] = None
    pending: bool = False


class IntentCreated(BaseModel):
    payment_intent_id: str
    payment_client_key: Optional[str] = None


@dataclass
class WebhookRequest:
    """Transport-neutral view of an inbound callback."""
    method: str
    query: dict[str, str]
    body: bytes


@dataclass
class WebhookOutcome:
    status_code: int
    event_id: Optional[str] = None
    settled: bool = False
    notes: list[str] = field(default_factory=list)


# Request payloads for the REST surface

class ProcessPaymentRequest(BaseModel):
    payment_method_id: Optional[str] = None
    # Where the processor sends the customer back after 3DS or an e-wallet step
    gateway_return_url: Optional[str] = None
    return_url: str
    send_invoice: bool = False


class ConfirmPaymentRequest(BaseModel):
    return_url: str
    send_invoice: bool = False


class CreateSourceRequest(BaseModel):
    success_url: Optional[str] = None
    fail_url: Optional[str] = None


class CreateCheckoutRequest(BaseModel):
    success_url: str
    failure_url: str


class CreatePaymentMethodRequest(BaseModel):
    details: Optional[dict[str, Any]] = None


class RegisterWebhooksRequest(BaseModel):
    callback_url: Optional[str] = None
