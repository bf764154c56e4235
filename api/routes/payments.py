"""
Payments API routes.

Thin layer over the orchestrators composed at startup. An orchestrator
returning None means the attempt stopped with customer notices queued;
those are rendered as a PaymentNotProcessed error.
"""
from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from api.dependencies import PaymentServices, get_order, get_payment_services
from application.dtos.payments import (
    ConfirmPaymentRequest,
    CreateCheckoutRequest,
    CreatePaymentMethodRequest,
    CreateSourceRequest,
    ProcessPaymentRequest,
    RegisterWebhooksRequest,
    WebhookRequest,
)
from core.config import settings
from core.i18n import t
from core.logging_config import get_logger
from core.response import error_response, success_response
from domain.common.exceptions import PaymentNotProcessedException
from domain.payment.entity import Order
from infrastructure.adapters.order_settlement_port import begin_notices, collect_notices
from shared.codes import BusinessCode


router = APIRouter(prefix="/payments", tags=["Payments"])
logger = get_logger(__name__)


async def open_notices() -> None:
    # async so the collection is set in the request task's own context
    begin_notices()


def _ensure_processed(order: Order, result: Optional[Any]) -> Any:
    if result is None:
        raise PaymentNotProcessedException(order.id, [n["message"] for n in collect_notices()])
    return result


@router.post("/orders/{order_id}/intent", summary="Create payment intent", dependencies=[Depends(open_notices)])
async def create_payment_intent(
    order: Order = Depends(get_order),
    services: PaymentServices = Depends(get_payment_services),
):
    created = _ensure_processed(order, await services.intents.create_payment_intent(order))
    return success_response(data=created.model_dump(mode="json"), message=t("Payment intent created"))


@router.post(
    "/orders/{order_id}/payment-methods/{method_tag}",
    summary="Create payment method",
    dependencies=[Depends(open_notices)],
)
async def create_payment_method(
    method_tag: str,
    payload: CreatePaymentMethodRequest,
    order: Order = Depends(get_order),
    services: PaymentServices = Depends(get_payment_services),
):
    creator = services.method_creator(method_tag)
    details = payload.details
    payment_method = _ensure_processed(
        order, await creator.create_payment_method(order, (lambda _order: details) if details is not None else None)
    )
    return success_response(data=payment_method.model_dump(mode="json"), message=t("Payment method created"))


@router.post("/orders/{order_id}/process", summary="Process payment", dependencies=[Depends(open_notices)])
async def process_payment(
    payload: ProcessPaymentRequest,
    order: Order = Depends(get_order),
    services: PaymentServices = Depends(get_payment_services),
):
    result = await services.intents.process_payment(
        order,
        payload.payment_method_id,
        payload.gateway_return_url or payload.return_url,
        payload.return_url,
        payload.send_invoice,
    )
    _ensure_processed(order, result)
    return success_response(data=result.model_dump(mode="json"), message=t("Payment processed"))


@router.post("/orders/{order_id}/confirm", summary="Confirm payment intent", dependencies=[Depends(open_notices)])
async def confirm_payment(
    payload: ConfirmPaymentRequest,
    order: Order = Depends(get_order),
    services: PaymentServices = Depends(get_payment_services),
):
    result = _ensure_processed(
        order, await services.intents.confirm_payment(order, payload.return_url, payload.send_invoice)
    )
    return success_response(data=result.model_dump(mode="json"), message=t("Payment confirmed"))


@router.post("/orders/{order_id}/sources/{ewallet_type}", summary="Create e-wallet source", dependencies=[Depends(open_notices)])
async def create_source(
    ewallet_type: str,
    payload: CreateSourceRequest,
    order: Order = Depends(get_order),
    services: PaymentServices = Depends(get_payment_services),
):
    result = _ensure_processed(
        order, await services.sources.create_source(order, ewallet_type, payload.success_url, payload.fail_url)
    )
    return success_response(data=result.model_dump(mode="json"), message=t("Source created"))


@router.post("/orders/{order_id}/checkout", summary="Create hosted checkout", dependencies=[Depends(open_notices)])
async def create_checkout(
    payload: CreateCheckoutRequest,
    order: Order = Depends(get_order),
    services: PaymentServices = Depends(get_payment_services),
):
    if services.checkout is None:
        return JSONResponse(
            status_code=503,
            content=error_response(
                code=BusinessCode.SERVICE_UNAVAILABLE,
                message=t("Hosted checkout is not configured"),
                error_type="ServiceUnavailable",
            ).model_dump(mode="json"),
        )
    result = _ensure_processed(
        order, await services.checkout.create_checkout(order, payload.success_url, payload.failure_url)
    )
    return success_response(data=result.model_dump(mode="json"), message=t("Checkout created"))


@router.api_route("/webhook", methods=["GET", "POST"], summary="Checkout webhook")
async def checkout_webhook(request: Request, services: PaymentServices = Depends(get_payment_services)):
    outcome = await services.webhooks.handle_callback(
        WebhookRequest(method=request.method, query=dict(request.query_params), body=await request.body())
    )
    if outcome.status_code == 204:
        return Response(status_code=204)
    if outcome.status_code >= 400:
        return JSONResponse(
            status_code=outcome.status_code,
            content=error_response(
                code=BusinessCode.PARAM_ERROR,
                message=t("Invalid webhook request"),
                error_type="InvalidWebhook",
            ).model_dump(mode="json"),
        )
    return success_response(
        data={"id": outcome.event_id, "settled": outcome.settled},
        message=t("Webhook received"),
    )


@router.post("/webhooks/register", summary="Register checkout webhooks")
async def register_webhooks(
    payload: RegisterWebhooksRequest,
    services: PaymentServices = Depends(get_payment_services),
):
    callback_url = payload.callback_url or services.webhook_callback_url or (
        f"{services.config.site_url}{settings.API_PREFIX}/payments/webhook?wc-api={services.webhooks.route}"
    )
    if services.webhooks.gateway is None:
        return JSONResponse(
            status_code=503,
            content=error_response(
                code=BusinessCode.SERVICE_UNAVAILABLE,
                message=t("Hosted checkout is not configured"),
                error_type="ServiceUnavailable",
            ).model_dump(mode="json"),
        )
    errors = await services.webhooks.register_webhooks(callback_url)
    return success_response(
        data={"callback_url": callback_url, "errors": errors},
        message=t("Webhooks registered") if not errors else t("Webhooks registered with errors"),
    )
