"""Marketplace HTTP API package."""

from marketplace.api.routes import (
    address_router,
    cart_router,
    order_router,
    product_router,
    shop_router,
)

__all__ = ["address_router", "cart_router", "order_router", "product_router", "shop_router"]
