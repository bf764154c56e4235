"""
Payment-related settings using pydantic-settings v2 with nested env keys.

Values are read once at startup and frozen into a GatewayConfig that is
passed to every orchestrator constructor.
"""
from __future__ import annotations

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, ConfigDict, Field


class PaymentTimeouts(BaseModel):
    connect: float = 1.0
    read: float = 3.0
    write: float = 3.0
    total: float = 5.0


class PaymentRetry(BaseModel):
    max: int = 2
    base_backoff: float = 0.2


class WebhookSettings(BaseModel):
    # Value of the `wc-api` routing query parameter accepted by the callback
    route: str = "cynder_paymaya"
    callback_url: Optional[str] = None
    events: list[str] = Field(default_factory=lambda: ["CHECKOUT_SUCCESS", "CHECKOUT_FAILURE", "CHECKOUT_DROPOUT"])


class PayMongoSettings(BaseModel):
    public_key: Optional[str] = None
    secret_key: Optional[str] = None
    test_public_key: Optional[str] = None
    test_secret_key: Optional[str] = None
    api_base: str = "https://api.paymongo.com/v1"


class PayMayaSettings(BaseModel):
    public_key: Optional[str] = None
    secret_key: Optional[str] = None
    api_base: str = "https://pg-sandbox.paymaya.com"


class GatewayConfig(BaseModel):
    """Immutable per-process view of the gateway configuration."""

    test_mode: bool
    debug_mode: bool
    public_key: Optional[str]
    secret_key: Optional[str]
    agent: str
    version: str
    site_url: str
    source_redirect_route: str

    model_config = ConfigDict(frozen=True)

    @property
    def provenance(self) -> dict[str, str]:
        return {"agent": self.agent, "version": self.version}


class PaymentSettings(BaseSettings):
    test_mode: bool = Field(default=True, validation_alias="PAYMENT__TEST_MODE")
    debug_mode: bool = Field(default=False, validation_alias="PAYMENT__DEBUG_MODE")
    site_url: str = Field(default="http://localhost:8000", validation_alias="PAYMENT__SITE_URL")
    agent: str = "cynder_woocommerce"
    version: str = "1.0.0"
    source_redirect_route: str = "cynder_paymongo_catch_source_redirect"

    timeouts: PaymentTimeouts = Field(default_factory=PaymentTimeouts)
    retry: PaymentRetry = Field(default_factory=PaymentRetry)
    webhook: WebhookSettings = Field(default_factory=WebhookSettings)

    paymongo: PayMongoSettings = Field(default_factory=PayMongoSettings)
    paymaya: PayMayaSettings = Field(default_factory=PayMayaSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )

    def gateway_config(self) -> GatewayConfig:
        """Resolve the sandbox/live key pair and freeze the result."""
        if self.test_mode:
            public_key, secret_key = self.paymongo.test_public_key, self.paymongo.test_secret_key
        else:
            public_key, secret_key = self.paymongo.public_key, self.paymongo.secret_key
        return GatewayConfig(
            test_mode=self.test_mode,
            debug_mode=self.debug_mode,
            public_key=public_key,
            secret_key=secret_key,
            agent=self.agent,
            version=self.version,
            site_url=self.site_url.rstrip("/"),
            source_redirect_route=self.source_redirect_route,
        )


payment_settings = PaymentSettings()
