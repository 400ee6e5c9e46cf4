"""Pydantic request/response schemas for the storefront API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# --- Shared ---


class StatusResponse(BaseModel):
    status: str = "ok"


class IdResponse(BaseModel):
    id: str


class MessageResponse(BaseModel):
    message: str


# --- Cart ---


class AddCartItemRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "8b0c2d4e-5f61-4a7b-9c8d-0e1f2a3b4c5d",
                    "variant_id": "1a2b3c4d-5e6f-4a7b-8c9d-0e1f2a3b4c5d",
                    "quantity": 2,
                }
            ]
        }
    }

    product_id: str
    variant_id: str | None = None
    quantity: int = 1


class UpdateCartItemRequest(BaseModel):
    quantity: int


class ApplyDiscountRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"code": "WELCOME10", "amount": 10.0}]}}

    code: str = Field(..., min_length=1, max_length=100)
    amount: float = Field(..., ge=0)


class CheckoutRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "email": "ada@example.com",
                    "name": "Ada Lovelace",
                    "shipping_address": {
                        "line1": "Via Roma 1",
                        "city": "Milano",
                        "postal_code": "20121",
                        "country": "IT",
                    },
                    "payment_method": "card",
                    "payment_details": {"payment_method_id": "pm_card_visa"},
                }
            ]
        }
    }

    email: str | None = Field(None, max_length=255)
    customer_email: str | None = Field(None, max_length=255)
    name: str | None = Field(None, max_length=255)
    customer_name: str | None = Field(None, max_length=255)
    shipping_address: dict[str, Any] | None = None
    billing_address: dict[str, Any] | None = None
    payment_method: str | None = Field(None, max_length=50)
    notes: str | None = None
    payment_details: dict[str, Any] = Field(default_factory=dict)


# --- Catalogue ---


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "slug": "hand-bound-sketchbook",
                    "title": "Hand-bound Sketchbook",
                    "short_description": "A5, 120 pages of 160gsm paper.",
                    "base_price": 24.5,
                    "currency": "EUR",
                    "sku": "SKB-A5",
                    "status": "published",
                }
            ]
        }
    }

    slug: str = Field(..., max_length=255)
    title: str = Field(..., max_length=255)
    base_price: float = Field(..., ge=0)
    short_description: str | None = None
    long_description: str | None = None
    currency: str = Field("EUR", max_length=3)
    sku: str | None = Field(None, max_length=100)
    gtin: str | None = Field(None, max_length=14)
    status: str | None = Field(None, max_length=20)
    category_id: str | None = None


class UpdateProductRequest(BaseModel):
    slug: str | None = Field(None, max_length=255)
    title: str | None = Field(None, max_length=255)
    base_price: float | None = Field(None, ge=0)
    short_description: str | None = None
    long_description: str | None = None
    currency: str | None = Field(None, max_length=3)
    sku: str | None = Field(None, max_length=100)
    gtin: str | None = Field(None, max_length=14)
    status: str | None = Field(None, max_length=20)
    category_id: str | None = None


class AddVariantRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "A4",
                    "sku": "SKB-A4",
                    "attributes": {"size": "A4"},
                    "price_adjustment": 6.0,
                    "stock": 12,
                }
            ]
        }
    }

    name: str = Field(..., max_length=255)
    sku: str | None = Field(None, max_length=100)
    attributes: dict[str, Any] | None = None
    price_adjustment: float = 0.0
    stock: int = Field(0, ge=0)


class UpdateVariantRequest(BaseModel):
    name: str | None = Field(None, max_length=255)
    sku: str | None = Field(None, max_length=100)
    attributes: dict[str, Any] | None = None
    price_adjustment: float | None = None
    stock: int | None = Field(None, ge=0)


class AddImageRequest(BaseModel):
    url: str = Field(..., max_length=500)
    alt_text: str | None = Field(None, max_length=255)
    position: int | None = Field(None, ge=0)


class UpdateImageRequest(BaseModel):
    alt_text: str | None = Field(None, max_length=255)
    position: int | None = Field(None, ge=0)


class InventoryAdjustment(BaseModel):
    product_id: str
    variant_id: str
    quantity: int


class AdjustInventoryRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "adjustments": [
                        {"product_id": "prod-1", "variant_id": "var-1", "quantity": 5},
                        {"product_id": "prod-1", "variant_id": "var-1", "quantity": -2},
                    ]
                }
            ]
        }
    }

    adjustments: list[InventoryAdjustment]


class CreateCategoryRequest(BaseModel):
    name: str = Field(..., max_length=100)
    slug: str = Field(..., max_length=120)
    description: str | None = None
    parent_id: str | None = None


class UpdateCategoryRequest(BaseModel):
    name: str | None = Field(None, max_length=100)
    slug: str | None = Field(None, max_length=120)
    description: str | None = None
    parent_id: str | None = None


# --- Orders ---


class UpdatePaymentStatusRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"status": "paid", "payment_intent_id": "pi_123"}]}}

    status: str
    payment_intent_id: str | None = None


class UpdateFulfillmentRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"fulfillment_status": "fulfilled"}]}}

    fulfillment_status: str


class PaymentResponse(BaseModel):
    success: bool
    transaction_id: str | None = None
    error: str | None = None
