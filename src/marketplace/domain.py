"""Marketplace bounded context: catalogue stock, address book, carts and orders.

Orders, the stock counters they consume and the carts they are checked out
from live in one domain so that a placement, its stock decrements and the
cart clear commit in a single unit of work.
"""

from protean.domain import Domain

from marketplace.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

marketplace = Domain(name="marketplace")
