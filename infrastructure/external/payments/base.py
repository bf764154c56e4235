"""
Base payment client implementing shared concerns: http, retry, logging and
error mapping.

Concrete processors subclass and implement their endpoints.
"""
from __future__ import annotations

from typing import Any, Optional

import httpx
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential, retry_if_exception_type

from application.dtos.payments import ProcessorError
from application.ports.payment_gateway import PaymentProcessorError, PaymentTransportError
from core.logging_config import get_logger


logger = get_logger(__name__)

# A POST may have reached the processor once the request is written, so only
# failures before the connection is established are safe to repeat.
_IDEMPOTENT_RETRY = (httpx.TimeoutException, httpx.TransportError)
_UNSENT_RETRY = (httpx.ConnectError, httpx.ConnectTimeout, httpx.PoolTimeout)


class BasePaymentClient:
    provider: str = "base"

    def __init__(
        self,
        *,
        base_url: str,
        auth: Optional[httpx.Auth] = None,
        timeouts: Optional[dict[str, float]] = None,
        retry: Optional[dict[str, Any]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._auth = auth
        self._timeouts_cfg = timeouts or {"connect": 1.0, "read": 3.0, "write": 3.0, "total": 5.0}
        self._retry_cfg = retry or {"max": 2, "base": 0.2}
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def timeouts(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self._timeouts_cfg["connect"],
            read=self._timeouts_cfg["read"],
            write=self._timeouts_cfg["write"],
            timeout=self._timeouts_cfg["total"],
        )

    @property
    def client(self) -> httpx.AsyncClient:
        # Created lazily and kept open for reuse; aclose() releases it.
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                auth=self._auth,
                timeout=self.timeouts,
                transport=self._transport,
                headers={"accept": "application/json"},
            )
        return self._client

    async def aclose(self) -> None:
        """Close underlying HTTP client if created."""
        if self._client is not None:
            try:
                await self._client.aclose()
            finally:
                self._client = None

    async def _send(self, method: str, path: str, *, json: Any = None, auth: Optional[httpx.Auth] = None) -> httpx.Response:
        """Send with retry on transport failures only; HTTP errors are returned as-is."""
        retryable = _UNSENT_RETRY if method.upper() == "POST" else _IDEMPOTENT_RETRY
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(int(self._retry_cfg["max"]) + 1),
                wait=wait_exponential(multiplier=self._retry_cfg["base"], min=0.1, max=2.0),
                retry=retry_if_exception_type(retryable),
                reraise=True,
            ):
                with attempt:
                    kwargs: dict[str, Any] = {"json": json}
                    if auth is not None:
                        kwargs["auth"] = auth
                    return await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            self._log("payment_request_failed", method=method, path=path, error=str(exc))
            raise PaymentTransportError(str(exc), provider=self.provider) from exc
        raise PaymentTransportError("No response received", provider=self.provider)  # pragma: no cover

    def _decode(self, response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise PaymentTransportError(
                "Unreadable response body",
                provider=self.provider,
                body=response.text,
                status_code=response.status_code,
            ) from exc

    async def _request(self, method: str, path: str, *, json: Any = None, auth: Optional[httpx.Auth] = None) -> Any:
        """Send and decode; 4xx with an error list raises PaymentProcessorError."""
        response = await self._send(method, path, json=json, auth=auth)
        body = self._decode(response)
        self._log("payment_request_completed", method=method, path=path, status_code=response.status_code)

        if response.is_success:
            return body
        if response.is_client_error:
            errors = self._parse_errors(body)
            if errors:
                raise PaymentProcessorError(errors, provider=self.provider, status_code=response.status_code)
        raise PaymentTransportError(
            f"Unexpected status {response.status_code}",
            provider=self.provider,
            body=response.text,
            status_code=response.status_code,
        )

    def _parse_errors(self, body: Any) -> list[ProcessorError]:
        if not isinstance(body, dict):
            return []
        raw = body.get("errors")
        if isinstance(raw, list):
            return [ProcessorError.model_validate(e) for e in raw if isinstance(e, dict)]
        return []

    def _log(self, event: str, **kwargs) -> None:
        logger.info(
            event,
            provider=self.provider,
            **kwargs,
        )
