"""Stock movements spanning several products within one unit of work.

Order placement and cancellation touch many products at once. `StockLedger`
loads each product a single time, applies every adjustment in memory, and
only then writes the products back. A line that cannot be satisfied raises
before anything is persisted, and the surrounding unit of work discards the
rest of the handler's changes.

Products are persisted in ascending id order so that two concurrent
placements over overlapping products always contend in the same sequence.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.errors import InsufficientStockError, NotFoundError

logger = structlog.get_logger(__name__)


class StockLedger:
    def __init__(self):
        self._repo = current_domain.repository_for(Product)
        self._products: dict[str, Product] = {}

    def product(self, product_id) -> Product:
        """Load a product once per ledger; later lines see earlier adjustments."""
        key = str(product_id)
        if key not in self._products:
            try:
                self._products[key] = self._repo.get(key)
            except ObjectNotFoundError:
                raise NotFoundError(f"Product with ID {key} not found") from None
        return self._products[key]

    def decrement(self, product_id, quantity, variant_id=None):
        product = self.product(product_id)
        before = product.available_stock(variant_id)
        try:
            product.decrement_stock(quantity, variant_id=variant_id)
        except InsufficientStockError:
            logger.warning(
                "Stock decrement rejected",
                product_id=str(product_id),
                variant_id=str(variant_id) if variant_id else None,
                requested=quantity,
                available=before,
            )
            raise
        return product

    def restore(self, product_id, quantity, variant_id=None):
        product = self.product(product_id)
        product.restore_stock(quantity, variant_id=variant_id)
        return product

    def commit(self):
        for product_id in sorted(self._products):
            self._repo.add(self._products[product_id])

        logger.info("Stock adjustments persisted", products=len(self._products))
