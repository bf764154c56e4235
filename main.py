"""
FastAPI application entry point
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.dependencies import build_payment_services
from api.middleware import LocaleMiddleware, LoggingMiddleware, RequestIDMiddleware
from api.routes import payments as payments_routes
from core.config import settings
from core.exceptions import register_exception_handlers
from core.i18n import t
from core.logging_config import configure_logging, get_logger
from core.response import success_response
from core.settings import payment_settings
from infrastructure.adapters.order_settlement_port import OrderSettlementAdapter
from infrastructure.database import AsyncSessionLocal, create_tables, engine
from infrastructure.external.payments import get_checkout_gateway, get_payment_processor


# Configure logging explicitly at the entry point, not on import
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan"""
    # Development only; production schemas are managed outside the app
    if settings.DEBUG:
        await create_tables()
        logger.info("database_initialized", message="Database tables created (development)")

    config = payment_settings.gateway_config()
    try:
        processor = get_payment_processor(config, payment_settings)
    except RuntimeError as exc:
        processor = None
        logger.error("payment_processor_init_failed", error=str(exc))

    if processor is not None:
        adapter = OrderSettlementAdapter(AsyncSessionLocal)
        gateway = get_checkout_gateway(payment_settings)
        app.state.payments = build_payment_services(
            config,
            processor=processor,
            orders=adapter,
            settlement=adapter,
            gateway=gateway,
            webhook=payment_settings.webhook,
        )
        logger.info(
            "payments_initialized",
            test_mode=config.test_mode,
            checkout_enabled=gateway is not None,
        )

    yield

    services = getattr(app.state, "payments", None)
    if services is not None:
        await services.aclose()
    await engine.dispose()
    logger.info("application_shutdown", message="Application shutdown")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="PayMongo and PayMaya payment orchestration",
)

# Middleware runs bottom-up: request id first so later layers can log it
app.add_middleware(LoggingMiddleware)
app.add_middleware(LocaleMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(payments_routes.router, prefix=settings.API_PREFIX)


@app.get("/", tags=["Root"])
async def root():
    return success_response(
        data={
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": "/docs",
            "redoc": "/redoc"
        },
        message=t("Welcome")
    )


@app.get("/health", tags=["Health"])
async def health_check():
    return success_response(
        data={"status": "healthy", "payments": getattr(app.state, "payments", None) is not None},
        message=t("OK"),
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info"
    )
