"""Cart aggregate: one per user, holding priced lines until checkout.

Each line captures the discounted unit price and the per-unit delivery
charge at the moment it was added. Later catalogue price changes do not
touch existing lines; adding the same product/variant again refreshes the
snapshots. Totals are always derived from the lines and never stored.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Float, HasMany, Identifier, Integer

from marketplace.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemQuantityChanged,
    CartItemRemoved,
)
from marketplace.domain import marketplace
from marketplace.errors import NotFoundError


def price_snapshot_for(product, variant=None) -> float:
    """Unit price after the product's percentage discount, rounded to cents."""
    discount = product.discount or 0.0
    return round(product.unit_price(variant) * (1 - discount / 100), 2)


@marketplace.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True, min_value=1)
    price_snapshot = Float(required=True, min_value=0.0)
    delivery_charge_snapshot = Float(default=0.0, min_value=0.0)
    added_at = DateTime()
    updated_at = DateTime()

    @property
    def item_total(self) -> float:
        return round(self.price_snapshot * self.quantity, 2)

    @property
    def delivery_total(self) -> float:
        return round((self.delivery_charge_snapshot or 0.0) * self.quantity, 2)

    def matches(self, product_id, variant_id=None) -> bool:
        same_variant = (not self.variant_id and not variant_id) or str(self.variant_id) == str(variant_id)
        return str(self.product_id) == str(product_id) and same_variant


@marketplace.aggregate
class Cart:
    user_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Derived totals
    # -------------------------------------------------------------------
    @property
    def subtotal(self) -> float:
        return round(sum(item.item_total for item in self.items), 2)

    @property
    def total_delivery(self) -> float:
        return round(sum(item.delivery_total for item in self.items), 2)

    @property
    def total(self) -> float:
        return round(self.subtotal + self.total_delivery, 2)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    # -------------------------------------------------------------------
    # Lines
    # -------------------------------------------------------------------
    def find_item(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def get_item(self, item_id):
        item = self.find_item(item_id)
        if item is None:
            raise NotFoundError("Cart item not found")
        return item

    def line_for(self, product_id, variant_id=None):
        return next((i for i in self.items if i.matches(product_id, variant_id)), None)

    def quantity_of(self, product_id, variant_id=None) -> int:
        item = self.line_for(product_id, variant_id)
        return item.quantity if item is not None else 0

    def product_quantity(self, product_id, excluding=None) -> int:
        """Units of a product across all of its lines, optionally leaving one line out."""
        return sum(
            item.quantity
            for item in self.items
            if str(item.product_id) == str(product_id) and (excluding is None or str(item.id) != str(excluding))
        )

    def add_item(self, product_id, quantity, price_snapshot, delivery_charge_snapshot, variant_id=None):
        """Add a line, or grow the existing line for the same product/variant.

        Either way the line's snapshots are replaced with the given values.
        """
        now = datetime.now(UTC)
        existing = self.line_for(product_id, variant_id)

        if existing is not None:
            existing.quantity += quantity
            existing.price_snapshot = price_snapshot
            existing.delivery_charge_snapshot = delivery_charge_snapshot
            existing.updated_at = now
            item = existing
        else:
            item = CartItem(
                product_id=product_id,
                variant_id=variant_id,
                quantity=quantity,
                price_snapshot=price_snapshot,
                delivery_charge_snapshot=delivery_charge_snapshot,
                added_at=now,
                updated_at=now,
            )
            self.add_items(item)

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                variant_id=str(variant_id) if variant_id else None,
                quantity=quantity,
                price_snapshot=price_snapshot,
            )
        )
        return item

    def change_quantity(self, item_id, quantity):
        """Set a line's quantity. Zero or less removes the line."""
        item = self.get_item(item_id)
        if quantity <= 0:
            self.remove_item(item_id)
            return None

        previous_quantity = item.quantity
        now = datetime.now(UTC)
        item.quantity = quantity
        item.updated_at = now
        self.updated_at = now

        self.raise_(
            CartItemQuantityChanged(
                cart_id=str(self.id),
                item_id=str(item.id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )
        return item

    def remove_item(self, item_id):
        item = self.get_item(item_id)
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(item.product_id),
            )
        )

    def clear(self):
        removed = len(self.items)
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), user_id=str(self.user_id), items_removed=removed))
        return removed
