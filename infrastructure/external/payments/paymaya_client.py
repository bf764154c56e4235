"""
PayMaya checkout adapter: hosted checkout creation and webhook management.

Checkout calls authenticate with the public key, webhook management with
the secret key (both as Basic auth usernames).
"""
from __future__ import annotations

from typing import Any, Optional

import httpx

from application.dtos.payments import CheckoutSession, ProcessorError
from application.ports.payment_gateway import PaymentTransportError
from core.settings import PaymentSettings
from infrastructure.external.payments.base import BasePaymentClient


class PayMayaClient(BasePaymentClient):
    provider = "paymaya"

    def __init__(self, settings: PaymentSettings, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        creds = settings.paymaya
        if not creds.public_key or not creds.secret_key:
            raise RuntimeError("PayMaya keys not configured (PAYMAYA__PUBLIC_KEY / PAYMAYA__SECRET_KEY)")
        super().__init__(
            base_url=creds.api_base,
            auth=httpx.BasicAuth(creds.public_key, ""),
            timeouts=settings.timeouts.model_dump(),
            retry={"max": settings.retry.max, "base": settings.retry.base_backoff},
            transport=transport,
        )
        self._secret_auth = httpx.BasicAuth(creds.secret_key, "")

    async def create_checkout(self, payload: dict[str, Any]) -> CheckoutSession:
        body = await self._request("POST", "/checkout/v1/checkouts", json=payload)
        redirect_url = body.get("redirectUrl") if isinstance(body, dict) else None
        if not redirect_url:
            raise PaymentTransportError("Checkout response has no redirectUrl", provider=self.provider, body=str(body))
        return CheckoutSession(checkout_id=body.get("checkoutId"), redirect_url=redirect_url)

    async def list_webhooks(self) -> list[dict[str, Any]]:
        body = await self._request("GET", "/checkout/v1/webhooks", auth=self._secret_auth)
        return body if isinstance(body, list) else []

    async def delete_webhook(self, webhook_id: str) -> None:
        await self._request("DELETE", f"/checkout/v1/webhooks/{webhook_id}", auth=self._secret_auth)

    async def create_webhook(self, name: str, callback_url: str) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/checkout/v1/webhooks",
            json={"name": name, "callbackUrl": callback_url},
            auth=self._secret_auth,
        )

    def _parse_errors(self, body: Any) -> list[ProcessorError]:
        # PayMaya reports a single {code, message} object instead of a list
        if isinstance(body, dict) and body.get("message"):
            return [ProcessorError(code=str(body.get("code") or ""), detail=str(body["message"]))]
        return super()._parse_errors(body)
