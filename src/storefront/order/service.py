"""Order application service: checkout, status changes, payment and reporting."""

from dataclasses import dataclass

import structlog
from protean import UnitOfWork
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.service import CartService
from storefront.notification.service import NotificationService
from storefront.order.audit import AuditLog, audit_trail
from storefront.order.numbering import next_order_number
from storefront.order.order import Order, PaymentStatus
from storefront.payments.port import PaymentProvider
from storefront.shared.money import round_money

logger = structlog.get_logger(__name__)

MOCK_PAYMENT_INTENT = "mock_payment_intent"


@dataclass(frozen=True)
class CheckoutDetails:
    customer_email: str | None = None
    customer_name: str | None = None
    shipping_address: dict | None = None
    billing_address: dict | None = None
    payment_method: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class PaymentOutcome:
    success: bool
    transaction_id: str | None = None
    error: str | None = None

    def to_dict(self):
        return {"success": self.success, "transaction_id": self.transaction_id, "error": self.error}


@dataclass
class CheckoutResult:
    order: Order
    payment_metadata: dict | None = None
    payment_error: str | None = None


class OrderService:
    def __init__(
        self,
        cart_service: CartService,
        notifications: NotificationService,
        payment_provider: PaymentProvider | None = None,
        marketplace_provider: PaymentProvider | None = None,
    ):
        self.cart_service = cart_service
        self.notifications = notifications
        self.payment_provider = payment_provider
        self.marketplace_provider = marketplace_provider

    @property
    def _repo(self):
        return current_domain.repository_for(Order)

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def create_order_from_cart(self, session_id: str, checkout: CheckoutDetails) -> Order:
        cart_repo = current_domain.repository_for(Cart)
        cart = self.cart_service.get_or_create_cart(session_id)
        if not cart.items:
            raise ValidationError({"cart": ["Cart is empty"]})

        lines = self.cart_service.priced_lines(cart)
        if not lines:
            raise ValidationError({"cart": ["None of the cart items are available any more"]})

        totals = self.cart_service.totals_for(cart, lines)
        items_data = [
            {
                "product_id": str(line.product.id),
                "variant_id": str(line.variant.id) if line.variant else None,
                "product_name": line.product.title,
                "variant_name": line.variant.name if line.variant else None,
                "sku": (line.variant.sku if line.variant and line.variant.sku else line.product.sku),
                "unit_price": line.unit_price,
                "quantity": line.item.quantity,
                "total_price": line.line_total,
            }
            for line in lines
        ]

        with UnitOfWork():
            order = Order.create(
                order_number=next_order_number(),
                items_data=items_data,
                subtotal=totals.subtotal,
                tax=totals.tax,
                discount=totals.discount,
                total=totals.total,
                customer_email=checkout.customer_email,
                customer_name=checkout.customer_name,
                shipping_address=checkout.shipping_address,
                billing_address=checkout.billing_address,
                payment_method=checkout.payment_method,
                notes=checkout.notes,
                currency=lines[0].product.currency,
            )
            self._repo.add(order)

            cart.clear()
            cart.remove_discount()
            cart_repo.add(cart)

        logger.info(
            "order_created",
            order_id=str(order.id),
            order_number=order.order_number,
            item_count=len(items_data),
            total=order.total,
        )
        self.notifications.create_order_notification(order.id, order.order_number, "new")
        return order

    def checkout(self, session_id: str, checkout: CheckoutDetails, payment_details: dict | None = None) -> CheckoutResult:
        """Create the order, then charge it unless the customer chose the mock method."""
        order = self.create_order_from_cart(session_id, checkout)
        result = CheckoutResult(order=order)

        if checkout.payment_method == "mock":
            return result

        provider = self.payment_provider
        if checkout.payment_method == "etsy" and self.marketplace_provider is not None:
            provider = self.marketplace_provider

        if provider is None:
            result.order = self.update_payment_status(order.id, PaymentStatus.PAID.value, MOCK_PAYMENT_INTENT)
            return result

        details = {**(payment_details or {}), "order_id": str(order.id), "customer_email": order.customer_email}
        payment = provider.process_payment(order.total, order.currency or "EUR", details)

        if payment.success and not payment.redirect:
            result.order = self.update_payment_status(order.id, PaymentStatus.PAID.value, payment.transaction_id)
        elif not payment.success:
            result.payment_error = payment.error or "Payment failed"
            logger.warning("checkout_payment_failed", order_id=str(order.id), provider=provider.name, error=payment.error)

        result.payment_metadata = payment.metadata
        return result

    # -------------------------------------------------------------------
    # Status changes
    # -------------------------------------------------------------------
    def update_payment_status(self, order_id, status, payment_intent_id=None) -> Order:
        order = self._repo.get_order(order_id)
        became_paid = order.set_payment_status(status, payment_intent_id)
        self._repo.add(order)

        logger.info("order_payment_status_changed", order_id=str(order.id), payment_status=order.payment_status)
        if became_paid:
            self.notifications.create_order_notification(order.id, order.order_number, "paid")
        return order

    def update_fulfillment_status(self, order_id, status) -> Order:
        order = self._repo.get_order(order_id)
        shipped = order.set_fulfillment_status(status)
        self._repo.add(order)

        logger.info("order_fulfillment_status_changed", order_id=str(order.id), fulfillment_status=order.fulfillment_status)
        if shipped:
            self.notifications.create_order_notification(order.id, order.order_number, "shipped")
        return order

    def process_payment(self, order_id) -> PaymentOutcome:
        """Charge an existing order through the configured provider. Never raises."""
        try:
            order = self._repo.get_order(order_id)
        except ObjectNotFoundError:
            return PaymentOutcome(success=False, error="Order not found")

        if order.is_paid:
            return PaymentOutcome(success=False, transaction_id=order.payment_intent_id, error="Order already paid")

        if self.payment_provider is None:
            self.update_payment_status(order.id, PaymentStatus.PAID.value, MOCK_PAYMENT_INTENT)
            return PaymentOutcome(success=True, transaction_id=MOCK_PAYMENT_INTENT)

        try:
            result = self.payment_provider.process_payment(
                order.total,
                order.currency or "EUR",
                {"order_id": str(order.id), "customer_email": order.customer_email},
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("payment_provider_error", order_id=str(order.id), provider=self.payment_provider.name)
            return PaymentOutcome(success=False, error=str(exc) or "Payment failed")

        if not result.success:
            return PaymentOutcome(success=False, error=result.error or "Payment failed")

        self.update_payment_status(order.id, PaymentStatus.PAID.value, result.transaction_id)
        return PaymentOutcome(success=True, transaction_id=result.transaction_id)

    def cancel_order(self, order_id) -> Order:
        order = self._repo.get_order(order_id)
        order.cancel()
        self._repo.add(order)
        logger.info("order_cancelled", order_id=str(order.id), order_number=order.order_number)
        return self._repo.get_order(order_id, include_deleted=True)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def get_order(self, order_id, include_deleted: bool = False) -> Order:
        return self._repo.get_order(order_id, include_deleted=include_deleted)

    def get_order_by_number(self, order_number: str) -> Order:
        order = self._repo.find_by_number(order_number)
        if order is None:
            raise ObjectNotFoundError("Order not found")
        return order

    def get_audit_trail(self, order_id) -> list[AuditLog]:
        order = self._repo.get_order(order_id, include_deleted=True)
        return audit_trail(order.id)

    def get_orders_by_customer(self, customer_email: str) -> list[Order]:
        return list(self._repo.all_matching(customer_email=customer_email))

    def list_orders(self, filters: dict | None = None, page: int = 1, per_page: int = 20) -> tuple[list[Order], int]:
        return self._repo.search(page=page, per_page=per_page, **(filters or {}))

    def get_statistics(self, date_from=None, date_to=None) -> dict:
        total_orders = 0
        total_revenue = 0.0
        pending_orders = 0
        paid_orders = 0

        for order in self._repo.all_matching(date_from=date_from, date_to=date_to):
            total_orders += 1
            if order.payment_status == PaymentStatus.PAID.value:
                paid_orders += 1
                total_revenue += order.total or 0.0
            elif order.payment_status == PaymentStatus.PENDING.value:
                pending_orders += 1

        return {
            "total_orders": total_orders,
            "total_revenue": round_money(total_revenue),
            "pending_orders": pending_orders,
            "paid_orders": paid_orders,
        }

