"""Repositories for the catalogue aggregates."""

from protean.exceptions import ObjectNotFoundError

from storefront.catalogue.category import Category
from storefront.catalogue.product import Product, ProductStatus
from storefront.domain import storefront
from storefront.shared.pagination import paginate


@storefront.repository(part_of=Product)
class ProductRepository:
    def find_by_slug(self, slug: str, include_deleted: bool = False) -> Product | None:
        query = self._dao.query.filter(slug=slug)
        if not include_deleted:
            query = query.filter(deleted_at=None)
        return query.all().first

    def get_live(self, product_id) -> Product:
        """Fetch a product, treating a tombstoned product as missing."""
        try:
            product = self.get(product_id)
        except ObjectNotFoundError:
            raise ObjectNotFoundError("Product not found") from None
        if product.is_deleted:
            raise ObjectNotFoundError("Product not found")
        return product

    def search(
        self,
        status=None,
        category_id=None,
        search=None,
        min_price=None,
        max_price=None,
        include_deleted=False,
        page=1,
        per_page=20,
    ) -> tuple[list[Product], int]:
        query = self._dao.query
        if not include_deleted:
            query = query.filter(deleted_at=None)
        if status:
            query = query.filter(status=status)
        if category_id:
            query = query.filter(category_id=category_id)
        if search:
            query = query.filter(title__icontains=search)
        if min_price is not None:
            query = query.filter(base_price__gte=min_price)
        if max_price is not None:
            query = query.filter(base_price__lte=max_price)

        return paginate(query.order_by("-created_at"), page, per_page)

    def published(self, **filters) -> tuple[list[Product], int]:
        return self.search(status=ProductStatus.PUBLISHED.value, **filters)


@storefront.repository(part_of=Category)
class CategoryRepository:
    def find_by_slug(self, slug: str, include_deleted: bool = False) -> Category | None:
        query = self._dao.query.filter(slug=slug)
        if not include_deleted:
            query = query.filter(deleted_at=None)
        return query.all().first

    def listing(self, include_deleted=False, page=1, per_page=100) -> tuple[list[Category], int]:
        query = self._dao.query
        if not include_deleted:
            query = query.filter(deleted_at=None)
        return paginate(query.order_by("name"), page, per_page)
