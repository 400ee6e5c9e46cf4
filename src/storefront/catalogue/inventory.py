"""Inventory adjustment: command and handler.

Adjustments arrive as a batch of ``{product_id, variant_id, quantity}``
entries where ``quantity`` is a signed delta. Deltas targeting the same
variant are summed before they are applied, and the whole batch is applied
within one unit of work.
"""

from collections import defaultdict

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.shared.serialization import load_json


@storefront.command(part_of="Product")
class AdjustInventory:
    adjustments: Text(required=True)  # JSON: list of {product_id, variant_id, quantity}


def combine_adjustments(adjustments) -> dict[str, dict[str, int]]:
    """Group signed stock deltas by product and variant, summing duplicates."""
    combined: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for entry in adjustments:
        try:
            product_id = str(entry["product_id"])
            variant_id = str(entry["variant_id"])
            quantity = int(entry["quantity"])
        except (KeyError, TypeError, ValueError):
            raise ValidationError(
                {"adjustments": ["Each adjustment needs product_id, variant_id and an integer quantity"]}
            ) from None
        combined[product_id][variant_id] += quantity
    return {product_id: dict(variants) for product_id, variants in combined.items()}


@storefront.command_handler(part_of=Product)
class AdjustInventoryHandler:
    @handle(AdjustInventory)
    def adjust_inventory(self, command):
        adjustments = load_json(command.adjustments, default=[])
        if not adjustments:
            return 0

        repo = current_domain.repository_for(Product)
        applied = 0
        for product_id, deltas in combine_adjustments(adjustments).items():
            product = repo.get_live(product_id)
            for variant_id, delta in deltas.items():
                product.adjust_stock(variant_id, delta)
                applied += 1
            repo.add(product)
        return applied
