"""Service container built once at process start.

Route handlers receive the container through a FastAPI dependency instead of
reaching for module-level singletons.
"""

from dataclasses import dataclass

import structlog

from storefront.cart.service import CartService
from storefront.config import Settings
from storefront.notification.service import NotificationService
from storefront.order.service import OrderService
from storefront.payments import PaymentProvider, build_marketplace_provider, build_payment_provider

logger = structlog.get_logger(__name__)


@dataclass
class Services:
    settings: Settings
    carts: CartService
    orders: OrderService
    notifications: NotificationService
    payment_provider: PaymentProvider | None = None
    marketplace_provider: PaymentProvider | None = None

    def provider_named(self, name: str) -> PaymentProvider | None:
        for provider in (self.payment_provider, self.marketplace_provider):
            if provider is not None and provider.name == name:
                return provider
        return None


def build_services(
    settings: Settings | None = None,
    payment_provider: PaymentProvider | None = None,
    marketplace_provider: PaymentProvider | None = None,
) -> Services:
    """Wire the application services from settings.

    Explicit providers override the ones derived from settings.
    """
    settings = settings or Settings.from_env()
    payment_provider = payment_provider or build_payment_provider(settings)
    marketplace_provider = marketplace_provider or build_marketplace_provider(settings)

    notifications = NotificationService(ttl_days=settings.notification_ttl_days)
    carts = CartService(tax_rate=settings.tax_rate, ttl_days=settings.cart_ttl_days)
    orders = OrderService(
        cart_service=carts,
        notifications=notifications,
        payment_provider=payment_provider,
        marketplace_provider=marketplace_provider,
    )

    logger.info(
        "services_built",
        environment=settings.environment,
        payment_provider=payment_provider.name if payment_provider else None,
        marketplace_provider=marketplace_provider.name if marketplace_provider else None,
        tax_rate=settings.tax_rate,
    )
    return Services(
        settings=settings,
        carts=carts,
        orders=orders,
        notifications=notifications,
        payment_provider=payment_provider,
        marketplace_provider=marketplace_provider,
    )
