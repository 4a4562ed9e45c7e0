"""Cart line management: commands and handler.

Stock is checked when a line is added or resized but never reserved;
the authoritative check happens again at checkout.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from marketplace.cart.access import find_cart, load_cart
from marketplace.cart.cart import Cart, price_snapshot_for
from marketplace.cart.validation import available_for_line
from marketplace.catalogue.lookup import find_product, get_product
from marketplace.domain import marketplace
from marketplace.errors import InsufficientStockError, InvalidStateError, NotFoundError

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True, min_value=1)


@marketplace.command(part_of="Cart")
class UpdateCartItem:
    """Resize a line. A quantity of zero or less removes it."""

    user_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)


@marketplace.command(part_of="Cart")
class RemoveCartItem:
    user_id = Identifier(required=True)
    item_id = Identifier(required=True)


@marketplace.command(part_of="Cart")
class ClearCart:
    user_id = Identifier(required=True)


def _owned_cart_with_item(user_id, item_id) -> Cart:
    cart = find_cart(user_id)
    if cart is None or cart.find_item(item_id) is None:
        raise NotFoundError("Cart item not found")
    return cart


@marketplace.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = get_product(command.product_id)

        variant = None
        if command.variant_id:
            variant = product.find_variant(command.variant_id)
            if variant is None:
                raise NotFoundError("Variant not found")

        if not product.is_active:
            raise InvalidStateError("Product is not available")

        cart = load_cart(command.user_id)
        line = cart.line_for(product.id, command.variant_id)
        available = available_for_line(cart, product, variant, item_id=line.id if line is not None else None)
        requested = (line.quantity if line is not None else 0) + command.quantity
        if requested > available:
            raise InsufficientStockError(f"Insufficient stock. Only {available} available.")

        item = cart.add_item(
            product_id=str(product.id),
            variant_id=command.variant_id,
            quantity=command.quantity,
            price_snapshot=price_snapshot_for(product, variant),
            delivery_charge_snapshot=product.delivery_charge or 0.0,
        )
        current_domain.repository_for(Cart).add(cart)

        logger.debug(
            "Cart item added",
            user_id=str(command.user_id),
            product_id=str(product.id),
            quantity=item.quantity,
        )
        return str(item.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        cart = _owned_cart_with_item(command.user_id, command.item_id)

        if command.quantity <= 0:
            cart.remove_item(command.item_id)
        else:
            item = cart.get_item(command.item_id)
            product = find_product(item.product_id)
            if product is None or not product.is_active:
                raise InvalidStateError("Product is not available")

            variant = None
            if item.variant_id:
                variant = product.find_variant(item.variant_id)
                if variant is None:
                    raise InvalidStateError("Product is not available")
            available = available_for_line(cart, product, variant, item_id=item.id)

            if command.quantity > available:
                raise InsufficientStockError(f"Insufficient stock. Only {available} available.")

            cart.change_quantity(command.item_id, command.quantity)

        current_domain.repository_for(Cart).add(cart)
        logger.debug("Cart item updated", user_id=str(command.user_id), quantity=command.quantity)

    @handle(RemoveCartItem)
    def remove_cart_item(self, command):
        cart = _owned_cart_with_item(command.user_id, command.item_id)
        cart.remove_item(command.item_id)
        current_domain.repository_for(Cart).add(cart)

        logger.debug("Cart item removed", user_id=str(command.user_id), item_id=str(command.item_id))

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = load_cart(command.user_id)
        removed = cart.clear()
        current_domain.repository_for(Cart).add(cart)

        logger.debug("Cart cleared", user_id=str(command.user_id), items_removed=removed)
