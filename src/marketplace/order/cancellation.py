"""Order cancellation: command and handler.

Cancelling hands back exactly the stock placement took: the product pool
for every line, and the variant pool as well for variant lines.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.catalogue.stock import StockLedger
from marketplace.domain import marketplace
from marketplace.order.order import Order
from marketplace.order.queries import get_order_for_user

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)


def restore_order_stock(order):
    ledger = StockLedger()
    for product_id, variant_id, quantity in order.stock_lines():
        ledger.restore(product_id, quantity, variant_id=variant_id)
    ledger.commit()


@marketplace.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = get_order_for_user(command.order_id, command.user_id)
        order.cancel()
        restore_order_stock(order)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order cancelled, stock restored",
            order_id=str(order.id),
            user_id=str(command.user_id),
            lines=len(order.items),
        )
