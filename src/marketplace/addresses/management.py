"""Address book: commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.addresses.address import ADDRESS_FIELDS, OrderAddress, find_owned_address
from marketplace.domain import marketplace

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="OrderAddress")
class AddAddress:
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


@marketplace.command(part_of="OrderAddress")
class ReviseAddress:
    """Store an edited copy of an address. The original row stays as it was."""

    user_id = Identifier(required=True)
    address_id = Identifier(required=True)
    full_name = String(max_length=150)
    phone_number = String(max_length=30)
    line1 = String(max_length=255)
    line2 = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    postal_code = String(max_length=20)
    country = String(max_length=100)
    notes = Text()


@marketplace.command_handler(part_of=OrderAddress)
class ManageAddressesHandler:
    @handle(AddAddress)
    def add_address(self, command):
        address = OrderAddress.create(
            user_id=command.user_id,
            **{field: getattr(command, field) for field in ADDRESS_FIELDS},
        )
        current_domain.repository_for(OrderAddress).add(address)

        logger.info("Address added", address_id=str(address.id), user_id=str(command.user_id))
        return str(address.id)

    @handle(ReviseAddress)
    def revise_address(self, command):
        original = find_owned_address(command.address_id, command.user_id)
        revised = original.revise(**{field: getattr(command, field) for field in ADDRESS_FIELDS})
        current_domain.repository_for(OrderAddress).add(revised)

        logger.info(
            "Address revised",
            address_id=str(revised.id),
            previous_address_id=str(original.id),
            user_id=str(command.user_id),
        )
        return str(revised.id)
