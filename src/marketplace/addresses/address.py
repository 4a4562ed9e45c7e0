"""OrderAddress aggregate: an immutable shipping address owned by a user.

Orders keep a reference to the address they were placed with, so an address
is never edited in place. Revising one stores a new row.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import NotFoundError

ADDRESS_FIELDS = (
    "full_name",
    "phone_number",
    "line1",
    "line2",
    "city",
    "state",
    "postal_code",
    "country",
    "notes",
)


@marketplace.event(part_of="OrderAddress")
class AddressAdded:
    __version__ = "v1"

    address_id = Identifier(required=True)
    user_id = Identifier(required=True)
    city = String(required=True, max_length=100)
    country = String(required=True, max_length=100)
    revision_of = Identifier()


@marketplace.aggregate
class OrderAddress:
    user_id = Identifier(required=True)
    full_name = String(required=True, max_length=150)
    phone_number = String(required=True, max_length=30)
    line1 = String(required=True, max_length=255)
    line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(max_length=20)
    country = String(required=True, max_length=100)
    notes = Text()
    created_at = DateTime()

    @classmethod
    def create(cls, user_id, revision_of=None, **details):
        address = cls(user_id=user_id, created_at=datetime.now(UTC), **details)
        address.raise_(
            AddressAdded(
                address_id=str(address.id),
                user_id=str(user_id),
                city=address.city,
                country=address.country,
                revision_of=str(revision_of) if revision_of else None,
            )
        )
        return address

    def details(self) -> dict:
        return {field: getattr(self, field) for field in ADDRESS_FIELDS}

    def revise(self, **changes):
        """Return a new address carrying this one's details overlaid with `changes`."""
        details = self.details()
        details.update({k: v for k, v in changes.items() if v is not None})
        return OrderAddress.create(user_id=self.user_id, revision_of=self.id, **details)


def find_address(address_id) -> OrderAddress | None:
    try:
        return current_domain.repository_for(OrderAddress).get(str(address_id))
    except ObjectNotFoundError:
        return None


def find_owned_address(address_id, user_id) -> OrderAddress:
    """Load an address belonging to `user_id`.

    A missing address and another user's address are reported the same way,
    so callers cannot discover foreign ids.
    """
    address = find_address(address_id)
    if address is None or str(address.user_id) != str(user_id):
        raise NotFoundError("Shipping address not found or does not belong to this user")
    return address


def list_addresses(user_id) -> list[OrderAddress]:
    addresses = (
        current_domain.repository_for(OrderAddress)._dao.query.filter(user_id=str(user_id)).limit(None).all().items
    )
    return sorted(addresses, key=lambda a: a.created_at, reverse=True)
