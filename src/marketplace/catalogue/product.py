"""Product aggregate root with Variant and ProductImage entities.

A product carries its own sellable stock count, and each variant carries a
second, independent count. Stock only moves through `decrement_stock` and
`restore_stock`, which never let either pool go below zero.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from marketplace.catalogue.events import (
    ProductCreated,
    ProductPricingUpdated,
    ProductStatusChanged,
    StockDecremented,
    StockRestored,
    VariantAdded,
)
from marketplace.domain import marketplace
from marketplace.errors import InsufficientStockError, NotFoundError


class ProductStatus(Enum):
    ACTIVE = "ACTIVE"
    DRAFT = "DRAFT"
    INACTIVE = "INACTIVE"


@marketplace.entity(part_of="Product")
class Variant:
    """A purchasable configuration of a product, e.g. Color/Red."""

    name = String(required=True, max_length=100)
    value = String(required=True, max_length=100)
    price_diff = Float(default=0.0)
    stock = Integer(default=0, min_value=0)


@marketplace.entity(part_of="Product")
class ProductImage:
    url = String(required=True, max_length=500)
    display_order = Integer(default=0)


@marketplace.aggregate
class Product:
    shop_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    sku = String(max_length=50)
    description = Text()
    price = Float(required=True, min_value=0.0)
    discount = Float(min_value=0.0)  # percentage of the line subtotal
    delivery_charge = Float(default=0.0, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    status = String(choices=ProductStatus, default=ProductStatus.ACTIVE.value)
    variants = HasMany(Variant)
    images = HasMany(ProductImage)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def discount_must_be_a_percentage(self):
        if self.discount is not None and self.discount > 100:
            raise ValidationError({"discount": ["Discount is a percentage and cannot exceed 100"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        shop_id,
        name,
        price,
        discount=None,
        delivery_charge=0.0,
        stock=0,
        status=None,
        sku=None,
        description=None,
    ):
        now = datetime.now(UTC)
        product = cls(
            shop_id=shop_id,
            name=name,
            sku=sku,
            description=description,
            price=price,
            discount=discount,
            delivery_charge=delivery_charge or 0.0,
            stock=stock or 0,
            status=status or ProductStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=str(product.id),
                shop_id=str(shop_id),
                name=name,
                price=price,
                stock=product.stock,
                status=product.status,
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE.value

    @property
    def primary_image_url(self):
        if not self.images:
            return None
        return sorted(self.images, key=lambda image: image.display_order)[0].url

    def find_variant(self, variant_id):
        return next((v for v in self.variants if str(v.id) == str(variant_id)), None)

    def get_variant(self, variant_id):
        variant = self.find_variant(variant_id)
        if variant is None:
            raise NotFoundError(f"Variant with ID {variant_id} not found")
        return variant

    def available_stock(self, variant_id=None) -> int:
        """Stock a buyer can take. A variant line draws on both its own pool and the product's."""
        if variant_id:
            return min(self.stock, self.get_variant(variant_id).stock)
        return self.stock

    def unit_price(self, variant=None) -> float:
        """List price of one unit, before discount."""
        price_diff = (variant.price_diff or 0.0) if variant is not None else 0.0
        return self.price + price_diff

    # -------------------------------------------------------------------
    # Catalogue management
    # -------------------------------------------------------------------
    def add_variant(self, name, value, price_diff=0.0, stock=0):
        variant = Variant(name=name, value=value, price_diff=price_diff or 0.0, stock=stock or 0)
        self.add_variants(variant)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            VariantAdded(
                product_id=str(self.id),
                variant_id=str(variant.id),
                name=name,
                value=value,
                price_diff=variant.price_diff,
                stock=variant.stock,
            )
        )
        return variant

    def add_image(self, url):
        image = ProductImage(url=url, display_order=len(self.images))
        self.add_images(image)
        self.updated_at = datetime.now(UTC)
        return image

    def change_status(self, new_status):
        try:
            status = ProductStatus(new_status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown product status {new_status}"]}) from None
        previous_status = self.status
        self.status = status.value
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductStatusChanged(
                product_id=str(self.id),
                previous_status=previous_status,
                new_status=status.value,
            )
        )

    def update_pricing(self, price=None, discount=None, delivery_charge=None):
        """Change the given prices. `None` leaves a value as it is; a discount of 0 removes the discount."""
        if price is not None:
            self.price = price
        if discount is not None:
            self.discount = discount or None
        if delivery_charge is not None:
            self.delivery_charge = delivery_charge
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductPricingUpdated(
                product_id=str(self.id),
                price=self.price,
                discount=self.discount,
                delivery_charge=self.delivery_charge,
            )
        )

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def decrement_stock(self, quantity, variant_id=None):
        """Take `quantity` units out of the product pool and, for a variant line, the variant pool.

        Both pools are checked before either is touched, so a rejected
        decrement leaves the product unchanged.
        """
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        variant = self.get_variant(variant_id) if variant_id else None

        if self.stock < quantity:
            raise InsufficientStockError(f"Insufficient stock for product {self.name}")
        if variant is not None and variant.stock < quantity:
            raise InsufficientStockError(f"Insufficient stock for variant {variant.name}")

        self.stock -= quantity
        if variant is not None:
            variant.stock -= quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockDecremented(
                product_id=str(self.id),
                variant_id=str(variant.id) if variant is not None else None,
                quantity=quantity,
                product_stock=self.stock,
                variant_stock=variant.stock if variant is not None else None,
            )
        )

    def restore_stock(self, quantity, variant_id=None):
        """Put `quantity` units back, mirroring `decrement_stock`."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        variant = self.get_variant(variant_id) if variant_id else None

        self.stock += quantity
        if variant is not None:
            variant.stock += quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockRestored(
                product_id=str(self.id),
                variant_id=str(variant.id) if variant is not None else None,
                quantity=quantity,
                product_stock=self.stock,
                variant_stock=variant.stock if variant is not None else None,
            )
        )

    def restock(self, quantity, variant_id=None):
        """Receive new units. A variant restock also grows the product pool."""
        self.restore_stock(quantity, variant_id=variant_id)
