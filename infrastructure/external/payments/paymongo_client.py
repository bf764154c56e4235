"""
PayMongo adapter over the public REST API (JSON:API envelopes).

Endpoints used: payment methods, payment intents (create / retrieve /
attach) and sources. Amounts go out in minor units; secret key is sent as
the Basic auth username.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

import httpx

from application.dtos.payments import BillingObject, PaymentIntent, PaymentMethod, Source
from application.ports.payment_gateway import PaymentProcessorError, PaymentTransportError
from core.settings import GatewayConfig, PaymentSettings
from domain.payment.entity import to_minor_units
from infrastructure.external.payments.base import BasePaymentClient


class PayMongoClient(BasePaymentClient):
    provider = "paymongo"

    def __init__(
        self,
        config: GatewayConfig,
        settings: PaymentSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not config.secret_key:
            raise RuntimeError("PayMongo secret key not configured (PAYMONGO__SECRET_KEY / PAYMONGO__TEST_SECRET_KEY)")
        super().__init__(
            base_url=settings.paymongo.api_base,
            auth=httpx.BasicAuth(config.secret_key, ""),
            timeouts=settings.timeouts.model_dump(),
            retry={"max": settings.retry.max, "base": settings.retry.base_backoff},
            transport=transport,
        )

    @staticmethod
    def _envelope(attributes: dict[str, Any]) -> dict[str, Any]:
        return {"data": {"attributes": attributes}}

    @staticmethod
    def _resource(body: Any) -> dict[str, Any]:
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise PaymentTransportError("Response has no data resource", provider=PayMongoClient.provider, body=str(body))
        return data

    async def create_payment_method(
        self, method_type: str, details: Optional[dict[str, Any]], billing: BillingObject
    ) -> PaymentMethod:
        attributes: dict[str, Any] = {
            "type": method_type,
            "billing": billing.model_dump(exclude_none=True),
        }
        if details is not None:
            attributes["details"] = details
        body = await self._request("POST", "/payment_methods", json=self._envelope(attributes))
        return PaymentMethod.from_resource(self._resource(body))

    async def create_payment_intent(
        self, amount: int, currency: str, description: str, allowed_methods: list[str]
    ) -> PaymentIntent:
        attributes = {
            "amount": amount,
            "payment_method_allowed": allowed_methods,
            "currency": currency,
            "description": description,
        }
        body = await self._request("POST", "/payment_intents", json=self._envelope(attributes))
        return PaymentIntent.from_resource(self._resource(body))

    async def retrieve_payment_intent(self, intent_id: str) -> PaymentIntent:
        body = await self._request("GET", f"/payment_intents/{intent_id}")
        return PaymentIntent.from_resource(self._resource(body))

    async def attach_payment_method(self, intent_id: str, method_id: str, return_url: str) -> PaymentIntent:
        attributes = {"payment_method": method_id, "return_url": return_url}
        body = await self._request("POST", f"/payment_intents/{intent_id}/attach", json=self._envelope(attributes))
        return PaymentIntent.from_resource(self._resource(body))

    async def create_source(
        self,
        amount: Decimal,
        source_type: str,
        success_url: str,
        failed_url: str,
        billing: BillingObject,
        metadata: dict[str, str],
    ) -> Source:
        attributes = {
            "amount": to_minor_units(amount),
            "currency": "PHP",
            "type": source_type,
            "redirect": {"success": success_url, "failed": failed_url},
            "billing": billing.model_dump(exclude_none=True),
            "metadata": metadata,
        }
        try:
            body = await self._request("POST", "/sources", json=self._envelope(attributes))
        except PaymentProcessorError as exc:
            # Rejections come back to the caller as the source's error list
            return Source(errors=exc.errors)
        return Source.from_response(body)
