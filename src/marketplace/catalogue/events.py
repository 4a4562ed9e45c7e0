"""Domain events for the Shop and Product aggregates."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Shop")
class ShopCreated:
    """A vendor opened a new shop."""

    __version__ = "v1"

    shop_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    name = String(required=True, max_length=150)
    created_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductCreated:
    """A product was listed in a shop."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    shop_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True)
    stock = Integer(required=True)
    status = String(required=True, max_length=20)
    created_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class VariantAdded:
    """A purchasable variant was added to a product."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    value = String(required=True, max_length=100)
    price_diff = Float()
    stock = Integer(required=True)


@marketplace.event(part_of="Product")
class ProductStatusChanged:
    """A product moved between Active, Draft and Inactive."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    previous_status = String(required=True, max_length=20)
    new_status = String(required=True, max_length=20)


@marketplace.event(part_of="Product")
class ProductPricingUpdated:
    """Catalogue price, discount or delivery charge changed. Cart snapshots are unaffected."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    price = Float(required=True)
    discount = Float()
    delivery_charge = Float(required=True)


@marketplace.event(part_of="Product")
class StockDecremented:
    """Units were taken out of a product's (and optionally a variant's) stock."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True)
    product_stock = Integer(required=True)
    variant_stock = Integer()


@marketplace.event(part_of="Product")
class StockRestored:
    """Units were put back into stock, by a cancellation or a restock."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True)
    product_stock = Integer(required=True)
    variant_stock = Integer()
