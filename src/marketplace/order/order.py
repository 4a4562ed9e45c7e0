"""Order aggregate with its OrderItem lines.

An order is written once, together with all of its lines, and afterwards
only moves through status transitions. It is never deleted.

Order status:
    PENDING → CONFIRMED → SHIPPED → DELIVERED → RETURNED
    PENDING, CONFIRMED → CANCELLED
    CONFIRMED → RETURNED
    CANCELLED and RETURNED are terminal.

Payment status (independent of the order status):
    (none) → PENDING, PAID, FAILED
    PENDING → PAID, FAILED
    FAILED → PENDING, PAID
    PAID → REFUNDED
    Once an order is CANCELLED or RETURNED only REFUNDED is accepted.

Each line carries its own fulfilment status in the same value space as the
order status, advanced by the vendor who owns the line's shop.
"""

import secrets
import string
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from marketplace.domain import marketplace
from marketplace.errors import InvalidStateError, InvalidTransitionError, NotFoundError
from marketplace.order.events import (
    OrderCancelled,
    OrderItemStatusChanged,
    OrderPlaced,
    OrderStatusChanged,
    PaymentStatusChanged,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    RETURNED = "RETURNED"


class PaymentStatus(Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class PaymentMethod(Enum):
    COD = "COD"
    CARD = "CARD"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPED, OrderStatus.CANCELLED, OrderStatus.RETURNED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: {OrderStatus.RETURNED},
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.RETURNED: set(),  # Terminal
}

_TERMINAL_STATES = {OrderStatus.CANCELLED, OrderStatus.RETURNED}

_PAYMENT_TRANSITIONS = {
    None: {PaymentStatus.PENDING, PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.FAILED: {PaymentStatus.PENDING, PaymentStatus.PAID},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),  # Terminal
}


def _parse(enum_cls, value, field_name):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError({field_name: [f"Unknown value {value}"]}) from None


# ---------------------------------------------------------------------------
# Order numbers
# ---------------------------------------------------------------------------
ORDER_NUMBER_ALPHABET = string.ascii_uppercase + string.digits
ORDER_NUMBER_ATTEMPTS = 5


def generate_order_number(exists=None, now=None) -> str:
    """Return `ORD-YYYYMMDD-XXXXXX` for the current UTC date.

    `exists` is a predicate over candidate numbers; a candidate it accepts is
    discarded and drawn again, a bounded number of times.
    """
    date_part = (now or datetime.now(UTC)).strftime("%Y%m%d")
    for _ in range(ORDER_NUMBER_ATTEMPTS):
        suffix = "".join(secrets.choice(ORDER_NUMBER_ALPHABET) for _ in range(6))
        candidate = f"ORD-{date_part}-{suffix}"
        if exists is None or not exists(candidate):
            return candidate
    raise InvalidStateError("Could not allocate a unique order number")


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class OrderItem:
    """One purchased product (optionally a variant) with its price frozen at placement.

    Lines from different shops share an order; each line tracks its own
    fulfilment so vendors can ship independently.
    """

    product_id = Identifier(required=True)
    shop_id = Identifier(required=True)
    variant_id = Identifier()
    product_name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    discount_amount = Float(default=0.0)
    delivery_charge = Float(default=0.0)  # per unit
    total_price = Float(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    carrier = String(max_length=100)
    tracking_code = String(max_length=100)
    tracking_url = String(max_length=500)
    estimated_delivery = DateTime()
    delivered_at = DateTime()
    created_at = DateTime()


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Order:
    user_id = Identifier(required=True)
    order_number = String(required=True, max_length=30, unique=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus)
    payment_method = String(choices=PaymentMethod)
    subtotal_amount = Float(default=0.0)
    discount_amount = Float(default=0.0)
    delivery_total = Float(default=0.0)
    shipping_fee = Float(default=0.0)
    total_amount = Float(default=0.0)
    notes = Text()
    shipping_address_id = Identifier(required=True)
    items = HasMany(OrderItem)
    placed_at = DateTime()
    updated_at = DateTime()
    cancelled_at = DateTime()

    @invariant.post
    def total_must_add_up(self):
        expected = (
            (self.subtotal_amount or 0.0)
            - (self.discount_amount or 0.0)
            + (self.delivery_total or 0.0)
            + (self.shipping_fee or 0.0)
        )
        if abs(expected - (self.total_amount or 0.0)) > 0.005:
            raise ValidationError(
                {"total_amount": ["Total must equal subtotal - discount + delivery + shipping fee"]}
            )

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        user_id,
        order_number,
        lines,
        totals,
        shipping_address_id,
        payment_method=None,
        notes=None,
        source="DIRECT",
    ):
        """Build an order from priced lines (see `marketplace.order.pricing`)."""
        if not lines:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        if payment_method is not None:
            payment_method = _parse(PaymentMethod, payment_method, "payment_method").value

        order = cls(
            user_id=user_id,
            order_number=order_number,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value if payment_method else None,
            payment_method=payment_method,
            subtotal_amount=totals.subtotal,
            discount_amount=totals.discount,
            delivery_total=totals.delivery_total,
            shipping_fee=totals.shipping_fee,
            total_amount=totals.total,
            notes=notes,
            shipping_address_id=shipping_address_id,
            items=[
                OrderItem(
                    product_id=line.product_id,
                    shop_id=line.shop_id,
                    variant_id=line.variant_id,
                    product_name=line.product_name,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    discount_amount=line.line_discount,
                    delivery_charge=line.delivery_charge,
                    total_price=line.total_price,
                    created_at=now,
                )
                for line in lines
            ],
            placed_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                user_id=str(user_id),
                item_count=len(lines),
                subtotal_amount=totals.subtotal,
                discount_amount=totals.discount,
                delivery_total=totals.delivery_total,
                total_amount=totals.total,
                payment_method=payment_method,
                source=source,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def is_owned_by(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)

    def find_item(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def stock_lines(self):
        """(product_id, variant_id, quantity) for every line, as decremented at placement."""
        return [(str(i.product_id), str(i.variant_id) if i.variant_id else None, i.quantity) for i in self.items]

    # -------------------------------------------------------------------
    # Order status
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransitionError(f"Cannot transition order from {current.value} to {target_status.value}")

    def change_status(self, new_status):
        """Move along the status table. Cancellation goes through `cancel`."""
        target = _parse(OrderStatus, new_status, "status")
        if target == OrderStatus.CANCELLED:
            return self.cancel()

        self._assert_can_transition(target)
        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
                changed_at=now,
            )
        )

    def cancel(self):
        """Mark the order cancelled. The caller hands stock back for `stock_lines()`."""
        current = OrderStatus(self.status)
        if current == OrderStatus.CANCELLED:
            raise InvalidStateError("Order is already cancelled")
        if current in (OrderStatus.SHIPPED, OrderStatus.DELIVERED):
            raise InvalidStateError("Cannot cancel an order that has been shipped or delivered")
        self._assert_can_transition(OrderStatus.CANCELLED)

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancelled_at = now
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                user_id=str(self.user_id),
                previous_status=current.value,
                cancelled_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def update_payment(self, new_status, payment_method=None):
        target = _parse(PaymentStatus, new_status, "payment_status")
        current = PaymentStatus(self.payment_status) if self.payment_status else None

        if OrderStatus(self.status) in _TERMINAL_STATES and target != PaymentStatus.REFUNDED:
            raise InvalidTransitionError(f"Only a refund can be recorded on a {self.status.lower()} order")
        if target not in _PAYMENT_TRANSITIONS.get(current, set()):
            previous = current.value if current else "NONE"
            raise InvalidTransitionError(f"Cannot transition payment from {previous} to {target.value}")

        if payment_method is not None:
            self.payment_method = _parse(PaymentMethod, payment_method, "payment_method").value
        self.payment_status = target.value
        self.updated_at = datetime.now(UTC)

        self.raise_(
            PaymentStatusChanged(
                order_id=str(self.id),
                previous_status=current.value if current else None,
                new_status=target.value,
                payment_method=self.payment_method,
            )
        )

    # -------------------------------------------------------------------
    # Line fulfilment
    # -------------------------------------------------------------------
    def update_item_status(
        self,
        item_id,
        new_status,
        tracking_code=None,
        carrier=None,
        tracking_url=None,
        estimated_delivery=None,
    ):
        """Advance one line, or refresh its tracking details when the status is unchanged."""
        item = self.find_item(item_id)
        if item is None:
            raise NotFoundError("Order item not found")

        target = _parse(OrderStatus, new_status, "status")
        current = OrderStatus(item.status)
        if target != current and target not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransitionError(f"Cannot transition item from {current.value} to {target.value}")

        now = datetime.now(UTC)
        item.status = target.value
        if tracking_code is not None:
            item.tracking_code = tracking_code
        if carrier is not None:
            item.carrier = carrier
        if tracking_url is not None:
            item.tracking_url = tracking_url
        if estimated_delivery is not None:
            item.estimated_delivery = estimated_delivery
        if target == OrderStatus.DELIVERED and item.delivered_at is None:
            item.delivered_at = now
        self.updated_at = now

        self.raise_(
            OrderItemStatusChanged(
                order_id=str(self.id),
                item_id=str(item.id),
                shop_id=str(item.shop_id),
                previous_status=current.value,
                new_status=target.value,
                tracking_code=item.tracking_code,
                carrier=item.carrier,
            )
        )
        return item
