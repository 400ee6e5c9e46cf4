"""Runtime settings read from the environment."""

import os
from dataclasses import dataclass


def _csv(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    port: int = 8080
    environment: str = "development"
    cors_allowed_origins: tuple[str, ...] = ("*",)

    tax_rate: float = 0.0
    cart_ttl_days: int = 30
    notification_ttl_days: int = 90

    payment_provider: str = "mock"
    stripe_api_key: str | None = None
    stripe_webhook_secret: str | None = None
    mock_payment_min_amount: float = 1.0

    etsy_shop_name: str | None = None
    etsy_shop_url: str | None = None
    etsy_payment_callback_url: str | None = None

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            port=int(env.get("PORT", "8080")),
            environment=env.get("ENVIRONMENT", "development").lower(),
            cors_allowed_origins=_csv(env.get("CORS_ALLOWED_ORIGINS", "*")),
            tax_rate=float(env.get("TAX_RATE", "0")),
            cart_ttl_days=int(env.get("CART_TTL_DAYS", "30")),
            notification_ttl_days=int(env.get("NOTIFICATION_TTL_DAYS", "90")),
            payment_provider=env.get("PAYMENT_PROVIDER", "mock").lower(),
            stripe_api_key=env.get("STRIPE_API_KEY") or None,
            stripe_webhook_secret=env.get("STRIPE_WEBHOOK_SECRET") or None,
            mock_payment_min_amount=float(env.get("MOCK_PAYMENT_MIN_AMOUNT", "1")),
            etsy_shop_name=env.get("ETSY_SHOP_NAME") or None,
            etsy_shop_url=env.get("ETSY_SHOP_URL") or None,
            etsy_payment_callback_url=env.get("ETSY_PAYMENT_CALLBACK_URL") or None,
        )
