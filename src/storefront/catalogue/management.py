"""Product management: commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Product")
class CreateProduct:
    slug: String(required=True, max_length=255)
    title: String(required=True, max_length=255)
    base_price: Float(required=True, min_value=0.0)
    short_description: Text()
    long_description: Text()
    currency: String(max_length=3, default="EUR")
    sku: String(max_length=100)
    gtin: String(max_length=14)
    status: String(max_length=20)
    category_id: Identifier()


@storefront.command(part_of="Product")
class UpdateProduct:
    product_id: Identifier(required=True)
    slug: String(max_length=255)
    title: String(max_length=255)
    base_price: Float(min_value=0.0)
    short_description: Text()
    long_description: Text()
    currency: String(max_length=3)
    sku: String(max_length=100)
    gtin: String(max_length=14)
    status: String(max_length=20)
    category_id: Identifier()


@storefront.command(part_of="Product")
class DeleteProduct:
    product_id: Identifier(required=True)


@storefront.command(part_of="Product")
class RestoreProduct:
    product_id: Identifier(required=True)


def _ensure_slug_available(repo, slug, product_id=None):
    existing = repo.find_by_slug(slug, include_deleted=True)
    if existing is not None and str(existing.id) != str(product_id):
        raise ValidationError({"slug": [f"Product with slug '{slug}' already exists"]})


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        repo = current_domain.repository_for(Product)
        _ensure_slug_available(repo, command.slug)

        product = Product.create(
            slug=command.slug,
            title=command.title,
            base_price=command.base_price,
            short_description=command.short_description,
            long_description=command.long_description,
            currency=command.currency,
            sku=command.sku,
            gtin=command.gtin,
            status=command.status,
            category_id=command.category_id,
        )
        repo.add(product)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get_live(command.product_id)
        if command.slug and command.slug != product.slug:
            _ensure_slug_available(repo, command.slug, product.id)

        product.update_details(
            slug=command.slug,
            title=command.title,
            base_price=command.base_price,
            short_description=command.short_description,
            long_description=command.long_description,
            currency=command.currency,
            sku=command.sku,
            gtin=command.gtin,
            status=command.status,
            category_id=command.category_id,
        )
        repo.add(product)
        return str(product.id)

    @handle(DeleteProduct)
    def delete_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get_live(command.product_id)
        product.soft_delete()
        repo.add(product)

    @handle(RestoreProduct)
    def restore_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.restore()
        repo.add(product)
        return str(product.id)
