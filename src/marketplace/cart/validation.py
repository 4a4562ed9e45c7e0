"""Checkout pre-flight: re-check every cart line against the live catalogue."""

from dataclasses import dataclass, field

from marketplace.cart.access import find_cart
from marketplace.cart.cart import Cart
from marketplace.catalogue.lookup import find_product


@dataclass
class CartValidation:
    valid: bool
    errors: list[str] = field(default_factory=list)
    cart: Cart | None = None


def available_for_line(cart, product, variant=None, item_id=None) -> int:
    """Units one cart line may hold.

    A variant line is bounded by its variant pool, and every line of a
    product shares the product pool with the product's other lines in the cart.
    """
    others = cart.product_quantity(product.id, excluding=item_id)
    pool = product.available_stock(variant.id if variant is not None else None)
    return max(min(pool, product.stock - others), 0)


def line_problem(cart, item) -> str | None:
    """Describe why a cart line cannot be bought right now, or None if it can."""
    product = find_product(item.product_id)
    if product is None:
        return f"Product {item.product_id} no longer exists"
    if not product.is_active:
        return f'Product "{product.name}" is no longer available'

    variant = None
    if item.variant_id:
        variant = product.find_variant(item.variant_id)
        if variant is None:
            return f'Variant of "{product.name}" no longer exists'

    available = available_for_line(cart, product, variant, item_id=item.id)
    if item.quantity > available:
        return f'Insufficient stock for "{product.name}". Requested: {item.quantity}, Available: {available}'
    return None


def validate_for_checkout(user_id) -> CartValidation:
    """Validate a user's cart without modifying or creating anything."""
    cart = find_cart(user_id) or Cart.create(user_id=user_id)
    errors = [problem for problem in (line_problem(cart, item) for item in cart.items) if problem]
    return CartValidation(valid=not errors, errors=errors, cart=cart)
