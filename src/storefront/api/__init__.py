"""Storefront HTTP API package."""

from storefront.api.admin import admin_router
from storefront.api.application import create_app
from storefront.api.errors import register_exception_handlers
from storefront.api.shop import shop_router

__all__ = ["admin_router", "create_app", "register_exception_handlers", "shop_router"]
