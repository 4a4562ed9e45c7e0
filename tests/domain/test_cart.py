"""Domain tests for the Cart aggregate: upserts, snapshots and derived totals."""

import pytest

from marketplace.cart.cart import Cart, price_snapshot_for
from marketplace.cart.events import CartCleared, CartItemAdded, CartItemRemoved
from marketplace.catalogue.product import Product
from marketplace.errors import NotFoundError


def _cart():
    return Cart.create(user_id="user-001")


class TestPriceSnapshot:
    def test_discount_applied_to_price_plus_variant_difference(self):
        product = Product.create(shop_id="shop-001", name="Shirt", price=100.0, discount=10.0)
        variant = product.add_variant(name="Size", value="XL", price_diff=20.0)

        assert price_snapshot_for(product) == 90.0
        assert price_snapshot_for(product, variant) == 108.0

    def test_no_discount(self):
        product = Product.create(shop_id="shop-001", name="Mug", price=12.5)
        assert price_snapshot_for(product) == 12.5

    def test_rounded_to_cents(self):
        product = Product.create(shop_id="shop-001", name="Pen", price=9.99, discount=33.0)
        assert price_snapshot_for(product) == 6.69


class TestAddItem:
    def test_add_creates_line(self):
        cart = _cart()
        item = cart.add_item("prod-1", 2, price_snapshot=10.0, delivery_charge_snapshot=1.0)

        assert len(cart.items) == 1
        assert item.quantity == 2
        assert isinstance(cart._events[-1], CartItemAdded)

    def test_same_product_twice_is_one_line(self):
        cart = _cart()
        cart.add_item("prod-1", 2, price_snapshot=10.0, delivery_charge_snapshot=0.0)
        cart.add_item("prod-1", 3, price_snapshot=10.0, delivery_charge_snapshot=0.0)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_readding_refreshes_snapshots(self):
        cart = _cart()
        cart.add_item("prod-1", 1, price_snapshot=10.0, delivery_charge_snapshot=1.0)
        cart.add_item("prod-1", 1, price_snapshot=8.0, delivery_charge_snapshot=2.0)

        item = cart.items[0]
        assert item.price_snapshot == 8.0
        assert item.delivery_charge_snapshot == 2.0

    def test_different_variants_are_separate_lines(self):
        cart = _cart()
        cart.add_item("prod-1", 1, price_snapshot=10.0, delivery_charge_snapshot=0.0, variant_id="var-red")
        cart.add_item("prod-1", 1, price_snapshot=10.0, delivery_charge_snapshot=0.0, variant_id="var-blue")
        cart.add_item("prod-1", 1, price_snapshot=10.0, delivery_charge_snapshot=0.0)

        assert len(cart.items) == 3
        assert cart.quantity_of("prod-1", "var-red") == 1
        assert cart.quantity_of("prod-1") == 1


class TestChangeQuantity:
    def test_sets_quantity(self):
        cart = _cart()
        item = cart.add_item("prod-1", 1, price_snapshot=10.0, delivery_charge_snapshot=0.0)
        cart.change_quantity(item.id, 4)
        assert cart.items[0].quantity == 4

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_zero_or_less_removes_line(self, quantity):
        cart = _cart()
        item = cart.add_item("prod-1", 1, price_snapshot=10.0, delivery_charge_snapshot=0.0)

        cart.change_quantity(item.id, quantity)

        assert cart.items == []
        assert isinstance(cart._events[-1], CartItemRemoved)

    def test_unknown_item(self):
        cart = _cart()
        with pytest.raises(NotFoundError):
            cart.change_quantity("missing", 2)


class TestTotals:
    def test_totals_are_derived_from_lines(self):
        cart = _cart()
        cart.add_item("prod-1", 2, price_snapshot=10.0, delivery_charge_snapshot=1.5)
        cart.add_item("prod-2", 1, price_snapshot=5.25, delivery_charge_snapshot=0.0)

        assert cart.items[0].item_total == 20.0
        assert cart.items[0].delivery_total == 3.0
        assert cart.subtotal == 25.25
        assert cart.total_delivery == 3.0
        assert cart.total == 28.25
        assert cart.item_count == 3

    def test_empty_cart_totals(self):
        cart = _cart()
        assert cart.subtotal == 0
        assert cart.total == 0
        assert cart.item_count == 0


class TestClear:
    def test_clear_removes_every_line(self):
        cart = _cart()
        cart.add_item("prod-1", 2, price_snapshot=10.0, delivery_charge_snapshot=0.0)
        cart.add_item("prod-2", 1, price_snapshot=5.0, delivery_charge_snapshot=0.0)

        removed = cart.clear()

        assert removed == 2
        assert cart.items == []
        assert isinstance(cart._events[-1], CartCleared)
