"""Repository for the Order aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.shared.pagination import iter_all, paginate


@storefront.repository(part_of=Order)
class OrderRepository:
    def get_order(self, order_id, include_deleted: bool = False) -> Order:
        try:
            order = self.get(order_id)
        except ObjectNotFoundError:
            raise ObjectNotFoundError("Order not found") from None
        if order.is_deleted and not include_deleted:
            raise ObjectNotFoundError("Order not found")
        return order

    def find_by_number(self, order_number: str) -> Order | None:
        return self._dao.query.filter(order_number=order_number, deleted_at=None).all().first

    def _filtered(
        self,
        payment_status=None,
        fulfillment_status=None,
        customer_email=None,
        date_from=None,
        date_to=None,
        include_deleted=False,
    ):
        query = self._dao.query
        if not include_deleted:
            query = query.filter(deleted_at=None)
        if payment_status:
            query = query.filter(payment_status=payment_status)
        if fulfillment_status:
            query = query.filter(fulfillment_status=fulfillment_status)
        if customer_email:
            query = query.filter(customer_email=customer_email)
        if date_from:
            query = query.filter(created_at__gte=date_from)
        if date_to:
            query = query.filter(created_at__lte=date_to)
        return query.order_by("-created_at")

    def search(self, page=1, per_page=20, **filters) -> tuple[list[Order], int]:
        return paginate(self._filtered(**filters), page, per_page)

    def all_matching(self, **filters):
        return iter_all(self._filtered(**filters))
