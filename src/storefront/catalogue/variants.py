"""Variant and image management: commands and handler."""

from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.shared.serialization import load_json


@storefront.command(part_of="Product")
class AddVariant:
    product_id: Identifier(required=True)
    name: String(required=True, max_length=255)
    sku: String(max_length=100)
    attributes: Text()  # JSON object
    price_adjustment: Float(default=0.0)
    stock: Integer(default=0, min_value=0)


@storefront.command(part_of="Product")
class UpdateVariant:
    product_id: Identifier(required=True)
    variant_id: Identifier(required=True)
    name: String(max_length=255)
    sku: String(max_length=100)
    attributes: Text()
    price_adjustment: Float()
    stock: Integer(min_value=0)


@storefront.command(part_of="Product")
class DeleteVariant:
    product_id: Identifier(required=True)
    variant_id: Identifier(required=True)


@storefront.command(part_of="Product")
class AddProductImage:
    product_id: Identifier(required=True)
    url: String(required=True, max_length=500)
    alt_text: String(max_length=255)
    position: Integer(min_value=0)


@storefront.command(part_of="Product")
class UpdateProductImage:
    product_id: Identifier(required=True)
    image_id: Identifier(required=True)
    alt_text: String(max_length=255)
    position: Integer(min_value=0)


@storefront.command(part_of="Product")
class RemoveProductImage:
    product_id: Identifier(required=True)
    image_id: Identifier(required=True)


@storefront.command_handler(part_of=Product)
class ManageVariantsHandler:
    @handle(AddVariant)
    def add_variant(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get_live(command.product_id)
        variant = product.add_variant(
            name=command.name,
            sku=command.sku,
            attributes=load_json(command.attributes),
            price_adjustment=command.price_adjustment,
            stock=command.stock,
        )
        repo.add(product)
        return str(variant.id)

    @handle(UpdateVariant)
    def update_variant(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get_live(command.product_id)
        product.update_variant(
            command.variant_id,
            name=command.name,
            sku=command.sku,
            attributes=load_json(command.attributes),
            price_adjustment=command.price_adjustment,
            stock=command.stock,
        )
        repo.add(product)

    @handle(DeleteVariant)
    def delete_variant(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get_live(command.product_id)
        product.delete_variant(command.variant_id)
        repo.add(product)

    @handle(AddProductImage)
    def add_image(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get_live(command.product_id)
        image = product.add_image(url=command.url, alt_text=command.alt_text, position=command.position)
        repo.add(product)
        return str(image.id)

    @handle(UpdateProductImage)
    def update_image(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get_live(command.product_id)
        product.update_image(command.image_id, alt_text=command.alt_text, position=command.position)
        repo.add(product)

    @handle(RemoveProductImage)
    def remove_image(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get_live(command.product_id)
        product.remove_image(command.image_id)
        repo.add(product)
