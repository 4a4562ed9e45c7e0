"""Order placement: direct purchase and cart checkout, commands and handler.

Both paths do all of their work inside the handler's unit of work. Stock for
every line is checked and decremented in memory first; the order, the
products and (for checkout) the emptied cart are written only once every
line has passed. Any failure leaves no order and no stock change behind.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.addresses.address import find_owned_address
from marketplace.cart.cart import Cart
from marketplace.cart.validation import validate_for_checkout
from marketplace.catalogue.stock import StockLedger
from marketplace.domain import marketplace
from marketplace.errors import InvalidStateError
from marketplace.order.order import ORDER_NUMBER_ATTEMPTS, Order, generate_order_number
from marketplace.order.pricing import OrderTotals, price_cart_line, price_catalogue_line
from marketplace.order.queries import order_number_taken

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: [{"product_id", "variant_id"?, "quantity"}]
    shipping_address_id = Identifier(required=True)
    payment_method = String(max_length=10)
    notes = Text()


@marketplace.command(part_of="Order")
class CheckoutCart:
    user_id = Identifier(required=True)
    shipping_address_id = Identifier(required=True)
    payment_method = String(max_length=10)
    notes = Text()


def _requested_items(raw):
    items = json.loads(raw) if isinstance(raw, str) else raw
    if not items:
        raise ValidationError({"items": ["At least one item is required"]})

    requested = []
    for item in items:
        quantity = int(item.get("quantity") or 0)
        if quantity < 1:
            raise ValidationError({"items": ["Quantity must be at least 1"]})
        requested.append((str(item["product_id"]), item.get("variant_id") or None, quantity))
    return requested


def _add_with_unique_number(build):
    """Store the order `build` makes from a fresh number, drawing again while the number is taken.

    The number is checked before the order is written, since writing stores
    the order lines first. A clash that slips past the check still fails the
    write and with it the whole unit of work.
    """
    repo = current_domain.repository_for(Order)
    for _ in range(ORDER_NUMBER_ATTEMPTS):
        order = build(generate_order_number(exists=order_number_taken))
        try:
            repo._dao._validate_unique(order)
        except ValidationError as exc:
            if "order_number" not in exc.messages:
                raise
            logger.warning("Order number already taken, drawing again", order_number=order.order_number)
            continue
        repo.add(order)
        return order
    raise InvalidStateError("Could not allocate a unique order number")


@marketplace.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        requested = _requested_items(command.items)
        find_owned_address(command.shipping_address_id, command.user_id)

        ledger = StockLedger()
        lines = []
        for product_id, variant_id, quantity in requested:
            product = ledger.product(product_id)
            variant = product.get_variant(variant_id) if variant_id else None
            lines.append(price_catalogue_line(product, variant, quantity))
            ledger.decrement(product_id, quantity, variant_id=variant_id)

        order = _add_with_unique_number(
            lambda number: Order.place(
                user_id=command.user_id,
                order_number=number,
                lines=lines,
                totals=OrderTotals.from_lines(lines),
                shipping_address_id=command.shipping_address_id,
                payment_method=command.payment_method,
                notes=command.notes,
                source="DIRECT",
            )
        )
        ledger.commit()

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            user_id=str(command.user_id),
            items=len(lines),
            total=order.total_amount,
        )
        return str(order.id)

    @handle(CheckoutCart)
    def checkout_cart(self, command):
        validation = validate_for_checkout(command.user_id)
        if not validation.valid:
            raise InvalidStateError(f"Cart validation failed: {', '.join(validation.errors)}")

        cart = validation.cart
        if not cart.items:
            raise InvalidStateError("Cart is empty")

        find_owned_address(command.shipping_address_id, command.user_id)

        ledger = StockLedger()
        lines = []
        for item in cart.items:
            variant_id = str(item.variant_id) if item.variant_id else None
            product = ledger.product(item.product_id)
            variant = product.get_variant(variant_id) if variant_id else None
            lines.append(price_cart_line(product, variant, item))
            ledger.decrement(item.product_id, item.quantity, variant_id=variant_id)

        order = _add_with_unique_number(
            lambda number: Order.place(
                user_id=command.user_id,
                order_number=number,
                lines=lines,
                totals=OrderTotals.from_lines(lines),
                shipping_address_id=command.shipping_address_id,
                payment_method=command.payment_method,
                notes=command.notes,
                source="CART",
            )
        )
        ledger.commit()

        cart.clear()
        current_domain.repository_for(Cart).add(cart)

        logger.info(
            "Cart checked out",
            order_id=str(order.id),
            order_number=order.order_number,
            user_id=str(command.user_id),
            items=len(lines),
            total=order.total_amount,
        )
        return str(order.id)
