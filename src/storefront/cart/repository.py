"""Repository for the Cart aggregate."""

from storefront.cart.cart import Cart
from storefront.domain import storefront


@storefront.repository(part_of=Cart)
class CartRepository:
    def find_by_session(self, session_id: str) -> Cart | None:
        return self._dao.query.filter(session_id=session_id).all().first
