"""Per-line fulfilment by the vendor who owns the line's shop."""

import structlog
from protean import handle
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from marketplace.catalogue.lookup import get_shop
from marketplace.domain import marketplace
from marketplace.errors import ForbiddenError, NotFoundError
from marketplace.order.order import Order
from marketplace.order.queries import get_order

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class UpdateOrderItemStatus:
    order_id = Identifier(required=True)
    order_item_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    tracking_code = String(max_length=100)
    carrier = String(max_length=100)
    tracking_url = String(max_length=500)
    estimated_delivery = DateTime()


@marketplace.command_handler(part_of=Order)
class OrderItemFulfillmentHandler:
    @handle(UpdateOrderItemStatus)
    def update_item_status(self, command):
        order = get_order(command.order_id)
        item = order.find_item(command.order_item_id)
        if item is None:
            raise NotFoundError("Order item not found")

        if not get_shop(item.shop_id).is_owned_by(command.vendor_id):
            raise ForbiddenError("Unauthorized: You do not own this product")

        order.update_item_status(
            command.order_item_id,
            command.status,
            tracking_code=command.tracking_code,
            carrier=command.carrier,
            tracking_url=command.tracking_url,
            estimated_delivery=command.estimated_delivery,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order item status updated",
            order_id=str(order.id),
            item_id=str(command.order_item_id),
            vendor_id=str(command.vendor_id),
            status=command.status,
        )
