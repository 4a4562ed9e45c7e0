"""Order and payment status updates: commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.cancellation import restore_order_stock
from marketplace.order.order import Order, OrderStatus
from marketplace.order.queries import get_order_for_user

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    status = String(required=True, max_length=20)


@marketplace.command(part_of="Order")
class UpdatePaymentStatus:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    payment_status = String(required=True, max_length=20)
    payment_method = String(max_length=10)


@marketplace.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        order = get_order_for_user(command.order_id, command.user_id)
        previous_status = order.status

        order.change_status(command.status)
        if order.status == OrderStatus.CANCELLED.value:
            restore_order_stock(order)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order status updated",
            order_id=str(order.id),
            previous_status=previous_status,
            new_status=order.status,
        )

    @handle(UpdatePaymentStatus)
    def update_payment_status(self, command):
        order = get_order_for_user(command.order_id, command.user_id)
        order.update_payment(command.payment_status, payment_method=command.payment_method)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Payment status updated",
            order_id=str(order.id),
            payment_status=order.payment_status,
            payment_method=order.payment_method,
        )
