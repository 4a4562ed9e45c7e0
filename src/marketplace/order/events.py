"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """An order was placed, directly or by checking out a cart."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=30)
    user_id = Identifier(required=True)
    item_count = Integer(required=True)
    subtotal_amount = Float(required=True)
    discount_amount = Float(required=True)
    delivery_total = Float(required=True)
    total_amount = Float(required=True)
    payment_method = String(max_length=10)
    source = String(required=True, max_length=10)  # DIRECT or CART
    placed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderStatusChanged:
    __version__ = "v1"

    order_id = Identifier(required=True)
    previous_status = String(required=True, max_length=20)
    new_status = String(required=True, max_length=20)
    changed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderCancelled:
    """An order was cancelled and its stock handed back."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    previous_status = String(required=True, max_length=20)
    cancelled_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class PaymentStatusChanged:
    __version__ = "v1"

    order_id = Identifier(required=True)
    previous_status = String(max_length=20)
    new_status = String(required=True, max_length=20)
    payment_method = String(max_length=10)


@marketplace.event(part_of="Order")
class OrderItemStatusChanged:
    """A vendor moved one of their lines along, or updated its tracking."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    item_id = Identifier(required=True)
    shop_id = Identifier(required=True)
    previous_status = String(required=True, max_length=20)
    new_status = String(required=True, max_length=20)
    tracking_code = String(max_length=100)
    carrier = String(max_length=100)
