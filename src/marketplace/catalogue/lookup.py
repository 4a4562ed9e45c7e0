"""Catalogue lookups that translate missing records into business errors."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.catalogue.shop import Shop
from marketplace.errors import ForbiddenError, NotFoundError


def find_product(product_id) -> Product | None:
    try:
        return current_domain.repository_for(Product).get(str(product_id))
    except ObjectNotFoundError:
        return None


def get_product(product_id) -> Product:
    product = find_product(product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


def get_shop(shop_id) -> Shop:
    try:
        return current_domain.repository_for(Shop).get(str(shop_id))
    except ObjectNotFoundError:
        raise NotFoundError("Shop not found") from None


def get_owned_shop(shop_id, vendor_id) -> Shop:
    shop = get_shop(shop_id)
    if not shop.is_owned_by(vendor_id):
        raise ForbiddenError("Unauthorized: You do not own this shop")
    return shop


def get_owned_product(product_id, vendor_id) -> Product:
    """Load a product whose shop belongs to `vendor_id`."""
    product = get_product(product_id)
    shop = get_shop(product.shop_id)
    if not shop.is_owned_by(vendor_id):
        raise ForbiddenError("Unauthorized: You do not own this product")
    return product
