"""Domain tests for the Order aggregate: placement, status machine, payment and line fulfilment."""

import pytest
from protean.exceptions import ValidationError

from marketplace.catalogue.product import Product
from marketplace.errors import InvalidStateError, InvalidTransitionError, NotFoundError
from marketplace.order.events import (
    OrderCancelled,
    OrderItemStatusChanged,
    OrderPlaced,
    OrderStatusChanged,
    PaymentStatusChanged,
)
from marketplace.order.order import Order, OrderStatus, PaymentStatus, generate_order_number
from marketplace.order.pricing import OrderTotals, price_catalogue_line


def _order(payment_method=None, status=None):
    product = Product.create(shop_id="shop-001", name="Widget", price=100.0, discount=10.0, stock=5)
    lines = [price_catalogue_line(product, None, 2)]
    order = Order.place(
        user_id="user-001",
        order_number=generate_order_number(),
        lines=lines,
        totals=OrderTotals.from_lines(lines),
        shipping_address_id="addr-001",
        payment_method=payment_method,
    )
    if status is not None:
        order.status = status
    order._events.clear()
    return order


class TestPlacement:
    def test_placed_order_is_pending_with_totals(self):
        order = _order()

        assert order.status == OrderStatus.PENDING.value
        assert order.subtotal_amount == 200.0
        assert order.discount_amount == 20.0
        assert order.total_amount == 180.0
        assert len(order.items) == 1
        assert order.items[0].status == OrderStatus.PENDING.value

    def test_placement_raises_order_placed(self):
        product = Product.create(shop_id="shop-001", name="Widget", price=10.0, stock=5)
        lines = [price_catalogue_line(product, None, 1)]
        order = Order.place(
            user_id="user-001",
            order_number="ORD-20250101-ABC123",
            lines=lines,
            totals=OrderTotals.from_lines(lines),
            shipping_address_id="addr-001",
        )
        event = order._events[-1]
        assert isinstance(event, OrderPlaced)
        assert event.order_number == "ORD-20250101-ABC123"
        assert event.total_amount == 10.0

    def test_payment_status_pending_only_with_method(self):
        assert _order().payment_status is None
        with_method = _order(payment_method="COD")
        assert with_method.payment_status == PaymentStatus.PENDING.value
        assert with_method.payment_method == "COD"

    def test_unknown_payment_method_rejected(self):
        with pytest.raises(ValidationError):
            _order(payment_method="BITCOIN")

    def test_empty_order_rejected(self):
        with pytest.raises(ValidationError):
            Order.place(
                user_id="user-001",
                order_number="ORD-20250101-ABC123",
                lines=[],
                totals=OrderTotals.from_lines([]),
                shipping_address_id="addr-001",
            )


class TestStatusTransitions:
    @pytest.mark.parametrize(
        "start,target",
        [
            ("PENDING", "CONFIRMED"),
            ("CONFIRMED", "SHIPPED"),
            ("CONFIRMED", "RETURNED"),
            ("SHIPPED", "DELIVERED"),
            ("DELIVERED", "RETURNED"),
        ],
    )
    def test_allowed(self, start, target):
        order = _order(status=start)
        order.change_status(target)

        assert order.status == target
        event = order._events[-1]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == start

    @pytest.mark.parametrize(
        "start,target",
        [
            ("PENDING", "SHIPPED"),
            ("PENDING", "DELIVERED"),
            ("CONFIRMED", "DELIVERED"),
            ("SHIPPED", "CONFIRMED"),
            ("DELIVERED", "SHIPPED"),
            ("CANCELLED", "CONFIRMED"),
            ("RETURNED", "DELIVERED"),
            ("PENDING", "PENDING"),
        ],
    )
    def test_rejected(self, start, target):
        order = _order(status=start)
        with pytest.raises(InvalidTransitionError):
            order.change_status(target)
        assert order.status == start

    def test_unknown_status(self):
        order = _order()
        with pytest.raises(ValidationError):
            order.change_status("LOST")

    def test_change_to_cancelled_goes_through_cancel(self):
        order = _order()
        order.change_status("CANCELLED")
        assert order.status == OrderStatus.CANCELLED.value
        assert order.cancelled_at is not None
        assert isinstance(order._events[-1], OrderCancelled)


class TestCancel:
    @pytest.mark.parametrize("start", ["PENDING", "CONFIRMED"])
    def test_cancellable_states(self, start):
        order = _order(status=start)
        order.cancel()
        assert order.status == OrderStatus.CANCELLED.value
        assert order.cancelled_at is not None

    def test_already_cancelled(self):
        order = _order(status="CANCELLED")
        with pytest.raises(InvalidStateError, match="Order is already cancelled"):
            order.cancel()

    @pytest.mark.parametrize("start", ["SHIPPED", "DELIVERED"])
    def test_shipped_or_delivered(self, start):
        order = _order(status=start)
        with pytest.raises(InvalidStateError, match="shipped or delivered"):
            order.cancel()
        assert order.status == start

    def test_returned_is_terminal(self):
        order = _order(status="RETURNED")
        with pytest.raises(InvalidTransitionError):
            order.cancel()

    def test_stock_lines_cover_every_item(self):
        order = _order()
        lines = order.stock_lines()
        assert len(lines) == 1
        product_id, variant_id, quantity = lines[0]
        assert product_id == str(order.items[0].product_id)
        assert variant_id is None
        assert quantity == 2


class TestPaymentStatus:
    @pytest.mark.parametrize(
        "start,target",
        [
            (None, "PENDING"),
            (None, "PAID"),
            (None, "FAILED"),
            ("PENDING", "PAID"),
            ("PENDING", "FAILED"),
            ("FAILED", "PENDING"),
            ("FAILED", "PAID"),
            ("PAID", "REFUNDED"),
        ],
    )
    def test_allowed(self, start, target):
        order = _order()
        order.payment_status = start
        order.update_payment(target)

        assert order.payment_status == target
        assert isinstance(order._events[-1], PaymentStatusChanged)

    @pytest.mark.parametrize(
        "start,target",
        [(None, "REFUNDED"), ("PAID", "FAILED"), ("PAID", "PENDING"), ("REFUNDED", "PAID"), ("PENDING", "REFUNDED")],
    )
    def test_rejected(self, start, target):
        order = _order()
        order.payment_status = start
        with pytest.raises(InvalidTransitionError):
            order.update_payment(target)

    def test_sets_payment_method(self):
        order = _order()
        order.update_payment("PAID", payment_method="CARD")
        assert order.payment_method == "CARD"

    @pytest.mark.parametrize("terminal", ["CANCELLED", "RETURNED"])
    def test_terminal_order_only_accepts_refund(self, terminal):
        order = _order(payment_method="CARD", status=terminal)
        order.payment_status = "PAID"

        with pytest.raises(InvalidTransitionError):
            order.update_payment("FAILED")

        order.update_payment("REFUNDED")
        assert order.payment_status == PaymentStatus.REFUNDED.value


class TestItemStatus:
    def test_advance_item(self):
        order = _order()
        item_id = order.items[0].id

        order.update_item_status(item_id, "CONFIRMED")
        order.update_item_status(item_id, "SHIPPED", tracking_code="TRK1", carrier="UPS")

        item = order.find_item(item_id)
        assert item.status == "SHIPPED"
        assert item.tracking_code == "TRK1"
        assert item.carrier == "UPS"
        assert isinstance(order._events[-1], OrderItemStatusChanged)

    def test_same_status_updates_tracking_only(self):
        order = _order()
        item_id = order.items[0].id

        order.update_item_status(item_id, "PENDING", tracking_url="https://track.example.com/1")

        item = order.find_item(item_id)
        assert item.status == "PENDING"
        assert item.tracking_url == "https://track.example.com/1"

    def test_delivered_stamps_delivered_at(self):
        order = _order()
        item = order.items[0]
        item.status = "SHIPPED"

        order.update_item_status(item.id, "DELIVERED")

        assert order.find_item(item.id).delivered_at is not None

    def test_illegal_item_transition(self):
        order = _order()
        with pytest.raises(InvalidTransitionError):
            order.update_item_status(order.items[0].id, "DELIVERED")

    def test_unknown_item(self):
        order = _order()
        with pytest.raises(NotFoundError, match="Order item not found"):
            order.update_item_status("missing", "CONFIRMED")
