"""Shop aggregate: a vendor's storefront that owns products."""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, String, Text

from marketplace.catalogue.events import ShopCreated
from marketplace.domain import marketplace


@marketplace.aggregate
class Shop:
    name = String(required=True, max_length=150)
    vendor_id = Identifier(required=True)  # user id of the owning vendor
    description = Text()
    created_at = DateTime()

    @classmethod
    def create(cls, vendor_id, name, description=None):
        now = datetime.now(UTC)
        shop = cls(vendor_id=vendor_id, name=name, description=description, created_at=now)
        shop.raise_(
            ShopCreated(
                shop_id=str(shop.id),
                vendor_id=str(vendor_id),
                name=name,
                created_at=now,
            )
        )
        return shop

    def is_owned_by(self, user_id) -> bool:
        return str(self.vendor_id) == str(user_id)
