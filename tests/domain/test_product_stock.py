"""Domain tests for the guarded stock pools on Product and Variant."""

import pytest
from protean.exceptions import ValidationError

from marketplace.catalogue.events import StockDecremented, StockRestored
from marketplace.catalogue.product import Product, ProductStatus
from marketplace.errors import InsufficientStockError, NotFoundError


def _product(stock=5, **kwargs):
    product = Product.create(shop_id="shop-001", name="Widget", price=100.0, stock=stock, **kwargs)
    product._events.clear()
    return product


class TestProductCreation:
    def test_defaults_to_active(self):
        product = Product.create(shop_id="shop-001", name="Widget", price=10.0)
        assert product.status == ProductStatus.ACTIVE.value
        assert product.stock == 0
        assert product.delivery_charge == 0.0

    def test_discount_above_100_percent_rejected(self):
        with pytest.raises(ValidationError):
            Product.create(shop_id="shop-001", name="Widget", price=10.0, discount=150.0)

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError):
            Product.create(shop_id="shop-001", name="Widget", price=10.0, stock=-1)

    def test_unknown_status_rejected(self):
        product = _product()
        with pytest.raises(ValidationError):
            product.change_status("ARCHIVED")


class TestDecrementStock:
    def test_decrement_reduces_product_stock(self):
        product = _product(stock=5)
        product.decrement_stock(2)

        assert product.stock == 3
        event = product._events[-1]
        assert isinstance(event, StockDecremented)
        assert event.quantity == 2
        assert event.product_stock == 3

    def test_decrement_to_exactly_zero(self):
        product = _product(stock=2)
        product.decrement_stock(2)
        assert product.stock == 0

    def test_decrement_beyond_stock_fails_and_changes_nothing(self):
        product = _product(stock=1)

        with pytest.raises(InsufficientStockError, match="Insufficient stock for product Widget"):
            product.decrement_stock(2)

        assert product.stock == 1
        assert product._events == []

    def test_non_positive_quantity_rejected(self):
        product = _product()
        with pytest.raises(ValidationError):
            product.decrement_stock(0)

    def test_variant_line_decrements_both_pools(self):
        product = _product(stock=10)
        variant = product.add_variant(name="Color", value="Red", stock=4)

        product.decrement_stock(3, variant_id=variant.id)

        assert product.stock == 7
        assert product.get_variant(variant.id).stock == 1

    def test_variant_shortfall_leaves_both_pools_untouched(self):
        product = _product(stock=10)
        variant = product.add_variant(name="Color", value="Red", stock=1)

        with pytest.raises(InsufficientStockError, match="Insufficient stock for variant Color"):
            product.decrement_stock(2, variant_id=variant.id)

        assert product.stock == 10
        assert product.get_variant(variant.id).stock == 1

    def test_product_shortfall_blocks_variant_line(self):
        product = _product(stock=1)
        variant = product.add_variant(name="Color", value="Red", stock=5)

        with pytest.raises(InsufficientStockError):
            product.decrement_stock(2, variant_id=variant.id)

        assert product.get_variant(variant.id).stock == 5

    def test_unknown_variant(self):
        product = _product()
        with pytest.raises(NotFoundError):
            product.decrement_stock(1, variant_id="missing")


class TestRestoreStock:
    def test_restore_mirrors_decrement(self):
        product = _product(stock=5)
        variant = product.add_variant(name="Size", value="M", stock=5)

        product.decrement_stock(2, variant_id=variant.id)
        product.restore_stock(2, variant_id=variant.id)

        assert product.stock == 5
        assert product.get_variant(variant.id).stock == 5
        assert isinstance(product._events[-1], StockRestored)

    def test_restock_grows_stock(self):
        product = _product(stock=0)
        product.restock(10)
        assert product.stock == 10


class TestPricingHelpers:
    def test_unit_price_includes_variant_difference(self):
        product = _product()
        variant = product.add_variant(name="Size", value="XL", price_diff=15.0)
        assert product.unit_price() == 100.0
        assert product.unit_price(variant) == 115.0

    def test_update_pricing_only_touches_given_fields(self):
        product = _product()
        product.update_pricing(discount=25.0)
        assert product.price == 100.0
        assert product.discount == 25.0

    def test_primary_image_is_first_added(self):
        product = _product()
        assert product.primary_image_url is None
        product.add_image("https://img.example.com/1.png")
        product.add_image("https://img.example.com/2.png")
        assert product.primary_image_url == "https://img.example.com/1.png"
