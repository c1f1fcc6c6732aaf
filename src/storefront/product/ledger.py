"""Stock ledger: applies stock movements and undoes them when the surrounding work fails.

Placement and cancellation touch several products plus an order and a cart.
The handlers run inside one Protean unit of work, which gives full rollback on
providers with transactions. For providers without multi-document
transactions the ledger records every movement it wrote and, if the block
exits with an exception, writes the inverse movements before the exception
propagates.

Usage::

    with StockLedger() as ledger:
        ledger.reserve(product, 3)
        ...  # anything raising here releases the 3 units again
"""

import structlog
from protean.utils.globals import current_domain

from storefront.product.product import Product

logger = structlog.get_logger(__name__)

RESERVE = "reserve"
RELEASE = "release"


class StockLedger:
    def __init__(self):
        self._movements = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None and self._movements:
            self.undo(reason=str(exc))
        return False

    @property
    def movements(self):
        return list(self._movements)

    def reserve(self, product: Product, quantity: int) -> Product:
        """Move units from remaining to sold and write the product with a stock check."""
        observed_remaining = product.remaining_units
        product.reserve(quantity)
        current_domain.repository_for(Product).save_checked(product, observed_remaining)
        self._movements.append((str(product.id), RESERVE, quantity))
        return product

    def release(self, product: Product, quantity: int) -> Product:
        """Move units from sold back to remaining and write the product with a stock check."""
        observed_remaining = product.remaining_units
        product.release(quantity)
        current_domain.repository_for(Product).save_checked(product, observed_remaining)
        self._movements.append((str(product.id), RELEASE, quantity))
        return product

    def undo(self, reason=""):
        """Write the inverse of every recorded movement, latest first.

        A failure to compensate one product is logged and does not stop the
        remaining compensations.
        """
        repo = current_domain.repository_for(Product)
        logger.warning("Rolling back stock movements", movements=len(self._movements), reason=reason)

        for product_id, kind, quantity in reversed(self._movements):
            try:
                product = repo.get(product_id)
                if kind == RESERVE:
                    product.release(quantity)
                else:
                    product.reserve(quantity)
                repo.add(product)
            except Exception:
                logger.exception(
                    "Failed to roll back stock movement",
                    product_id=product_id,
                    movement=kind,
                    quantity=quantity,
                )
        self._movements.clear()
