"""Cancellation and administrative status changes for placed orders."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.config import get_settings
from storefront.domain import storefront
from storefront.errors import NotFound
from storefront.order.order import Order, OrderStatus, parse_status
from storefront.product.ledger import StockLedger
from storefront.product.product import Product

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    customer_id = Identifier()  # Set when a customer cancels; restricts to their own orders
    cancelled_by = String(max_length=50, default="Customer")


@storefront.command(part_of="Order")
class ChangeOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)


def _cancel(order, cancelled_by):
    """Return the order's stock to the catalogue and mark it cancelled, as one change."""
    product_repo = current_domain.repository_for(Product)

    with StockLedger() as ledger:
        order.cancel(cancelled_by=cancelled_by)
        for line in order.lines:
            product = product_repo.find_product(line.product_id)
            if product is None:
                logger.warning(
                    "Product no longer in catalogue, stock not restored",
                    order_id=str(order.id),
                    product_id=str(line.product_id),
                )
                continue
            ledger.release(product, line.quantity)
        current_domain.repository_for(Order).add(order)

    logger.info(
        "Order cancelled",
        order_id=str(order.id),
        cancelled_by=cancelled_by,
        restored_lines=len(ledger.movements),
    )
    return order


@storefront.command_handler(part_of=Order)
class OrderLifecycleHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = current_domain.repository_for(Order).get_order(command.order_id)
        if command.customer_id and str(order.customer_id) != str(command.customer_id):
            raise NotFound("Order not found", order_id=str(command.order_id))

        _cancel(order, command.cancelled_by or "Customer")
        return str(order.id)

    @handle(ChangeOrderStatus)
    def change_status(self, command):
        target = parse_status(command.status)
        repo = current_domain.repository_for(Order)
        order = repo.get_order(command.order_id)

        if target == OrderStatus.CANCELLED and OrderStatus(order.status) != OrderStatus.CANCELLED:
            _cancel(order, "Admin")
            return str(order.id)

        previous_status = order.status
        order.change_status(target, policy=get_settings().status_policy)
        repo.add(order)

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            previous_status=previous_status,
            new_status=order.status,
        )
        return str(order.id)
