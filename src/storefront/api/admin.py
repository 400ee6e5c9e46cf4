"""Back-office endpoints: catalogue management, orders, notifications and categories."""

import json
from datetime import datetime

from fastapi import APIRouter, Depends
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.api.dependencies import as_utc, get_services
from storefront.api.schemas import (
    AddImageRequest,
    AddVariantRequest,
    AdjustInventoryRequest,
    CreateCategoryRequest,
    CreateProductRequest,
    IdResponse,
    StatusResponse,
    UpdateCategoryRequest,
    UpdateFulfillmentRequest,
    UpdateImageRequest,
    UpdatePaymentStatusRequest,
    UpdateProductRequest,
    UpdateVariantRequest,
)
from storefront.catalogue.categories import CreateCategory, DeleteCategory, RestoreCategory, UpdateCategory
from storefront.catalogue.category import Category
from storefront.catalogue.inventory import AdjustInventory
from storefront.catalogue.management import CreateProduct, DeleteProduct, RestoreProduct, UpdateProduct
from storefront.catalogue.product import Product
from storefront.catalogue.variants import (
    AddProductImage,
    AddVariant,
    DeleteVariant,
    RemoveProductImage,
    UpdateProductImage,
    UpdateVariant,
)
from storefront.services import Services

admin_router = APIRouter(prefix="/api/admin", tags=["admin"])


def _product(product_id: str, include_deleted: bool = False) -> Product:
    repo = current_domain.repository_for(Product)
    if include_deleted:
        try:
            return repo.get(product_id)
        except ObjectNotFoundError:
            raise ObjectNotFoundError("Product not found") from None
    return repo.get_live(product_id)


def _category(category_id: str, include_deleted: bool = False) -> Category:
    try:
        category = current_domain.repository_for(Category).get(category_id)
    except ObjectNotFoundError:
        raise ObjectNotFoundError("Category not found") from None
    if category.is_deleted and not include_deleted:
        raise ObjectNotFoundError("Category not found")
    return category


# --- Products ---


@admin_router.get("/shop/products")
async def list_products(
    status: str | None = None,
    category_id: str | None = None,
    search: str | None = None,
    include_deleted: bool = False,
    page: int = 1,
    per_page: int = 20,
) -> dict:
    products, total = current_domain.repository_for(Product).search(
        status=status,
        category_id=category_id,
        search=search,
        include_deleted=include_deleted,
        page=page,
        per_page=per_page,
    )
    return {
        "products": [p.to_payload() for p in products],
        "total": total,
        "page": page,
        "per_page": per_page,
    }


@admin_router.post("/shop/products", status_code=201)
async def create_product(body: CreateProductRequest) -> dict:
    product_id = current_domain.process(CreateProduct(**body.model_dump()), asynchronous=False)
    return _product(product_id).to_payload()


@admin_router.get("/shop/products/{product_id}")
async def get_product(product_id: str, include_deleted: bool = False) -> dict:
    return _product(product_id, include_deleted).to_payload(include_deleted_variants=include_deleted)


@admin_router.patch("/shop/products/{product_id}")
async def update_product(product_id: str, body: UpdateProductRequest) -> dict:
    command = UpdateProduct(product_id=product_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return _product(product_id).to_payload()


@admin_router.delete("/shop/products/{product_id}", response_model=StatusResponse)
async def delete_product(product_id: str) -> StatusResponse:
    current_domain.process(DeleteProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


@admin_router.post("/shop/products/{product_id}/restore")
async def restore_product(product_id: str) -> dict:
    current_domain.process(RestoreProduct(product_id=product_id), asynchronous=False)
    return _product(product_id).to_payload()


@admin_router.post("/shop/products/{product_id}/variants", status_code=201, response_model=IdResponse)
async def add_variant(product_id: str, body: AddVariantRequest) -> IdResponse:
    command = AddVariant(
        product_id=product_id,
        name=body.name,
        sku=body.sku,
        attributes=json.dumps(body.attributes) if body.attributes is not None else None,
        price_adjustment=body.price_adjustment,
        stock=body.stock,
    )
    variant_id = current_domain.process(command, asynchronous=False)
    return IdResponse(id=variant_id)


@admin_router.patch("/shop/products/{product_id}/variants/{variant_id}")
async def update_variant(product_id: str, variant_id: str, body: UpdateVariantRequest) -> dict:
    changes = body.model_dump(exclude_none=True)
    if "attributes" in changes:
        changes["attributes"] = json.dumps(changes["attributes"])
    current_domain.process(UpdateVariant(product_id=product_id, variant_id=variant_id, **changes), asynchronous=False)
    return _product(product_id).to_payload()


@admin_router.delete("/shop/products/{product_id}/variants/{variant_id}", response_model=StatusResponse)
async def delete_variant(product_id: str, variant_id: str) -> StatusResponse:
    current_domain.process(DeleteVariant(product_id=product_id, variant_id=variant_id), asynchronous=False)
    return StatusResponse()


@admin_router.post("/shop/products/{product_id}/images", status_code=201, response_model=IdResponse)
async def add_image(product_id: str, body: AddImageRequest) -> IdResponse:
    command = AddProductImage(product_id=product_id, **body.model_dump(exclude_none=True))
    image_id = current_domain.process(command, asynchronous=False)
    return IdResponse(id=image_id)


@admin_router.patch("/shop/products/{product_id}/images/{image_id}")
async def update_image(product_id: str, image_id: str, body: UpdateImageRequest) -> dict:
    command = UpdateProductImage(product_id=product_id, image_id=image_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return _product(product_id).to_payload()


@admin_router.delete("/shop/products/{product_id}/images/{image_id}", response_model=StatusResponse)
async def remove_image(product_id: str, image_id: str) -> StatusResponse:
    current_domain.process(RemoveProductImage(product_id=product_id, image_id=image_id), asynchronous=False)
    return StatusResponse()


@admin_router.post("/shop/inventory/adjust")
async def adjust_inventory(body: AdjustInventoryRequest) -> dict:
    payload = json.dumps([adjustment.model_dump() for adjustment in body.adjustments])
    applied = current_domain.process(AdjustInventory(adjustments=payload), asynchronous=False)
    return {"status": "ok", "variants_adjusted": applied}


# --- Orders ---


@admin_router.get("/shop/orders")
async def list_orders(
    status: str | None = None,
    fulfillment_status: str | None = None,
    customer_email: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    include_deleted: bool = False,
    page: int = 1,
    per_page: int = 20,
    services: Services = Depends(get_services),
) -> dict:
    filters = {
        "payment_status": status,
        "fulfillment_status": fulfillment_status,
        "customer_email": customer_email,
        "date_from": as_utc(date_from),
        "date_to": as_utc(date_to),
        "include_deleted": include_deleted,
    }
    orders, total = services.orders.list_orders(filters, page, per_page)
    return {"orders": [o.to_payload() for o in orders], "total": total, "page": page, "per_page": per_page}


@admin_router.get("/shop/orders/statistics")
async def order_statistics(
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    services: Services = Depends(get_services),
) -> dict:
    return services.orders.get_statistics(as_utc(date_from), as_utc(date_to))


@admin_router.get("/shop/orders/number/{order_number}")
async def get_order_by_number(order_number: str, services: Services = Depends(get_services)) -> dict:
    return services.orders.get_order_by_number(order_number).to_payload()


@admin_router.get("/shop/orders/{order_id}")
async def get_order(order_id: str, include_deleted: bool = False, services: Services = Depends(get_services)) -> dict:
    return services.orders.get_order(order_id, include_deleted=include_deleted).to_payload()


@admin_router.get("/shop/orders/{order_id}/audit")
async def get_order_audit(order_id: str, services: Services = Depends(get_services)) -> dict:
    entries = services.orders.get_audit_trail(order_id)
    return {"entries": [entry.to_payload() for entry in entries], "total": len(entries)}


@admin_router.post("/shop/orders/{order_id}/status")
async def update_payment_status(
    order_id: str, body: UpdatePaymentStatusRequest, services: Services = Depends(get_services)
) -> dict:
    return services.orders.update_payment_status(order_id, body.status, body.payment_intent_id).to_payload()


@admin_router.patch("/shop/orders/{order_id}/fulfillment")
async def update_fulfillment(
    order_id: str, body: UpdateFulfillmentRequest, services: Services = Depends(get_services)
) -> dict:
    return services.orders.update_fulfillment_status(order_id, body.fulfillment_status).to_payload()


@admin_router.delete("/shop/orders/{order_id}")
async def cancel_order(order_id: str, services: Services = Depends(get_services)) -> dict:
    return services.orders.cancel_order(order_id).to_payload()


# --- Notifications ---


@admin_router.get("/notifications")
async def list_notifications(
    unread_only: bool = False,
    page: int = 1,
    per_page: int = 20,
    services: Services = Depends(get_services),
) -> dict:
    notifications, total = services.notifications.list_notifications(unread_only, page, per_page)
    return {
        "notifications": [n.to_payload() for n in notifications],
        "total": total,
        "unread_count": services.notifications.unread_count(),
        "page": page,
        "per_page": per_page,
    }


@admin_router.get("/notifications/unread-count")
async def unread_notifications(services: Services = Depends(get_services)) -> dict:
    return {"count": services.notifications.unread_count()}


@admin_router.post("/notifications/read-all")
async def mark_all_notifications_read(services: Services = Depends(get_services)) -> dict:
    return {"status": "ok", "updated": services.notifications.mark_all_as_read()}


@admin_router.get("/notifications/{notification_id}")
async def get_notification(notification_id: str, services: Services = Depends(get_services)) -> dict:
    return services.notifications.get(notification_id).to_payload()


@admin_router.patch("/notifications/{notification_id}/read")
async def mark_notification_read(notification_id: str, services: Services = Depends(get_services)) -> dict:
    return services.notifications.mark_as_read(notification_id).to_payload()


@admin_router.delete("/notifications/{notification_id}", response_model=StatusResponse)
async def delete_notification(notification_id: str, services: Services = Depends(get_services)) -> StatusResponse:
    services.notifications.delete(notification_id)
    return StatusResponse()


# --- Categories ---


@admin_router.get("/categories")
async def list_categories(include_deleted: bool = False) -> dict:
    categories, total = current_domain.repository_for(Category).listing(include_deleted=include_deleted)
    return {"categories": [c.to_payload() for c in categories], "total": total}


@admin_router.post("/categories", status_code=201)
async def create_category(body: CreateCategoryRequest) -> dict:
    category_id = current_domain.process(CreateCategory(**body.model_dump()), asynchronous=False)
    return _category(category_id).to_payload()


@admin_router.get("/categories/{category_id}")
async def get_category(category_id: str, include_deleted: bool = False) -> dict:
    return _category(category_id, include_deleted).to_payload()


@admin_router.patch("/categories/{category_id}")
async def update_category(category_id: str, body: UpdateCategoryRequest) -> dict:
    command = UpdateCategory(category_id=category_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return _category(category_id).to_payload()


@admin_router.delete("/categories/{category_id}", response_model=StatusResponse)
async def delete_category(category_id: str) -> StatusResponse:
    current_domain.process(DeleteCategory(category_id=category_id), asynchronous=False)
    return StatusResponse()


@admin_router.post("/categories/{category_id}/restore")
async def restore_category(category_id: str) -> dict:
    current_domain.process(RestoreCategory(category_id=category_id), asynchronous=False)
    return _category(category_id).to_payload()
