"""Public storefront endpoints: catalogue browsing, cart, checkout and payment."""

from fastapi import APIRouter, Depends, HTTPException, Request
from protean.utils.globals import current_domain

from storefront.api.dependencies import cart_session, get_services
from storefront.api.schemas import (
    AddCartItemRequest,
    ApplyDiscountRequest,
    CheckoutRequest,
    MessageResponse,
    PaymentResponse,
    UpdateCartItemRequest,
)
from storefront.catalogue.category import Category
from storefront.catalogue.product import Product
from storefront.order.service import CheckoutDetails
from storefront.services import Services

shop_router = APIRouter(prefix="/api/shop", tags=["shop"])


def _cart_response(services: Services, cart) -> dict:
    return {"cart": services.carts.describe(cart), **services.carts.totals_for(cart).to_dict()}


def resolve_category_id(category: str | None) -> str | None:
    """Accept either a category slug or a category id."""
    if not category:
        return None
    found = current_domain.repository_for(Category).find_by_slug(category)
    return str(found.id) if found else category


# --- Catalogue ---


@shop_router.get("/products")
async def list_products(
    category: str | None = None,
    search: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    price_min: float | None = None,
    price_max: float | None = None,
    page: int = 1,
    per_page: int = 20,
) -> dict:
    products, total = current_domain.repository_for(Product).published(
        category_id=resolve_category_id(category),
        search=search,
        min_price=min_price if min_price is not None else price_min,
        max_price=max_price if max_price is not None else price_max,
        page=page,
        per_page=per_page,
    )
    return {
        "products": [product.to_payload() for product in products],
        "total": total,
        "page": page,
        "per_page": per_page,
    }


@shop_router.get("/products/{slug}")
async def get_product(slug: str) -> dict:
    product = current_domain.repository_for(Product).find_by_slug(slug)
    if product is None or not product.is_published:
        raise HTTPException(status_code=404, detail="Product not found")
    return product.to_payload()


@shop_router.get("/categories")
async def list_categories() -> dict:
    categories, total = current_domain.repository_for(Category).listing()
    return {"categories": [category.to_payload() for category in categories], "total": total}


# --- Cart ---


@shop_router.get("/cart")
async def get_cart(session_id: str = Depends(cart_session), services: Services = Depends(get_services)) -> dict:
    return _cart_response(services, services.carts.get_cart(session_id))


@shop_router.post("/cart/items")
async def add_cart_item(
    body: AddCartItemRequest,
    session_id: str = Depends(cart_session),
    services: Services = Depends(get_services),
) -> dict:
    cart = services.carts.add_item(session_id, body.product_id, body.variant_id, body.quantity)
    return _cart_response(services, cart)


@shop_router.patch("/cart/items/{item_id}")
@shop_router.put("/cart/items/{item_id}")
async def update_cart_item(
    item_id: str,
    body: UpdateCartItemRequest,
    session_id: str = Depends(cart_session),
    services: Services = Depends(get_services),
) -> dict:
    cart = services.carts.update_item(session_id, item_id, body.quantity)
    return _cart_response(services, cart)


@shop_router.delete("/cart/items/{item_id}")
async def remove_cart_item(
    item_id: str,
    session_id: str = Depends(cart_session),
    services: Services = Depends(get_services),
) -> dict:
    cart = services.carts.remove_item(session_id, item_id)
    return _cart_response(services, cart)


@shop_router.delete("/cart", response_model=MessageResponse)
async def clear_cart(
    session_id: str = Depends(cart_session),
    services: Services = Depends(get_services),
) -> MessageResponse:
    services.carts.clear_cart(session_id)
    return MessageResponse(message="Cart cleared")


@shop_router.post("/cart/discount")
async def apply_discount(
    body: ApplyDiscountRequest,
    session_id: str = Depends(cart_session),
    services: Services = Depends(get_services),
) -> dict:
    cart = services.carts.apply_discount(session_id, body.code, body.amount)
    return _cart_response(services, cart)


@shop_router.delete("/cart/discount")
async def remove_discount(
    session_id: str = Depends(cart_session),
    services: Services = Depends(get_services),
) -> dict:
    cart = services.carts.remove_discount(session_id)
    return _cart_response(services, cart)


# --- Checkout & orders ---


@shop_router.post("/checkout", status_code=201)
async def checkout(
    body: CheckoutRequest,
    session_id: str = Depends(cart_session),
    services: Services = Depends(get_services),
) -> dict:
    details = CheckoutDetails(
        customer_email=body.email or body.customer_email,
        customer_name=body.name or body.customer_name,
        shipping_address=body.shipping_address,
        billing_address=body.billing_address,
        payment_method=body.payment_method,
        notes=body.notes,
    )
    result = services.orders.checkout(session_id, details, body.payment_details)

    response = result.order.to_payload()
    if result.payment_metadata:
        response["payment_metadata"] = result.payment_metadata
    if result.payment_error:
        response["payment_error"] = result.payment_error
    return response


@shop_router.get("/orders/{order_id}")
async def get_order(order_id: str, services: Services = Depends(get_services)) -> dict:
    return services.orders.get_order(order_id).to_payload()


@shop_router.post("/orders/{order_id}/pay", response_model=PaymentResponse)
async def pay_order(order_id: str, services: Services = Depends(get_services)) -> PaymentResponse:
    outcome = services.orders.process_payment(order_id)
    return PaymentResponse(**outcome.to_dict())


# --- Payment webhooks ---


@shop_router.post("/webhooks/{provider_name}")
async def payment_webhook(provider_name: str, request: Request, services: Services = Depends(get_services)) -> dict:
    provider = services.provider_named(provider_name)
    if provider is None:
        raise HTTPException(status_code=404, detail=f"Unknown payment provider: {provider_name}")

    payload = await request.body()
    signature = request.headers.get("stripe-signature") or request.headers.get("x-webhook-signature")
    result = provider.validate_webhook(payload, signature)
    if not result.valid:
        raise HTTPException(status_code=400, detail=result.error or "Invalid webhook")

    return {"received": True, "event": result.event}
