"""Order placement turns selected cart lines into an order and reserves their stock.

The whole sequence is one unit of work:

    1. Stage: load every selected product and check its remaining units
       against the requested quantity (repeated selections are combined).
       Nothing is written until every selection passes.
    2. Reserve: move the units from remaining to sold on each product, in
       selection order, with a checked write per product.
    3. Record: create the order with its lines priced at the current price.
    4. Prune: drop the ordered products from the customer's cart.

If anything fails after the first reservation, the stock ledger releases
the reservations already written and the error propagates unchanged.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.config import get_settings
from storefront.domain import storefront
from storefront.errors import InvalidInput
from storefront.order.order import Order, PaymentMethod, parse_payment_method
from storefront.product.ledger import StockLedger
from storefront.product.product import Product

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    selections = Text(required=True)  # JSON: list of {product_id, quantity}
    address = String(required=True, max_length=500)
    phone_number = String(required=True, max_length=30)
    payment_method = String(required=True, max_length=10)


def _parse_selections(raw):
    try:
        selections = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError as exc:
        raise InvalidInput("Selections must be a JSON list") from exc
    if not isinstance(selections, list) or not selections:
        raise InvalidInput("No products selected for order")

    merged = {}
    for selection in selections:
        product_id = selection.get("product_id") if isinstance(selection, dict) else None
        quantity = selection.get("quantity") if isinstance(selection, dict) else None
        if not product_id:
            raise InvalidInput("Every selection needs a product_id")
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise InvalidInput("Quantity must be a whole number of at least 1", product_id=str(product_id))
        merged[str(product_id)] = merged.get(str(product_id), 0) + quantity

    # dicts keep first-seen order, so input order is preserved
    return list(merged.items())


def payment_message(payment_method, total_amount):
    """Return ``(message, instructions)`` shown to the customer after placement."""
    if PaymentMethod(payment_method) == PaymentMethod.CASH:
        return "Order placed successfully. Pay in cash upon delivery.", None

    currency = get_settings().currency
    return (
        "Order placed successfully. Awaiting QR payment confirmation.",
        f"Please scan the QR code and send the payment of {currency} {total_amount:.2f}. "
        "Add your email in the remarks for confirmation.",
    )


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        method = parse_payment_method(command.payment_method)
        selections = _parse_selections(command.selections)

        cart_repo = current_domain.repository_for(Cart)
        cart = cart_repo.for_customer(command.customer_id)
        if cart is None or not cart.lines:
            raise InvalidInput("Cart is empty")

        # Stage every check before the first write
        product_repo = current_domain.repository_for(Product)
        staged = []
        for product_id, quantity in selections:
            product = product_repo.get_product(product_id)
            product.ensure_available(quantity)
            staged.append((product, quantity))

        with StockLedger() as ledger:
            lines_data = []
            for product, quantity in staged:
                ledger.reserve(product, quantity)
                lines_data.append(
                    {
                        "product_id": str(product.id),
                        "quantity": quantity,
                        "unit_price": product.price,
                    }
                )

            order = Order.place(
                customer_id=command.customer_id,
                lines_data=lines_data,
                address=command.address,
                phone_number=command.phone_number,
                payment_method=method.value,
            )
            current_domain.repository_for(Order).add(order)

            cart.prune([product_id for product_id, _ in selections], order_id=order.id)
            cart_repo.add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            customer_id=str(command.customer_id),
            line_count=len(lines_data),
            total_amount=order.total_amount,
            payment_method=order.payment_method,
        )

        message, instructions = payment_message(order.payment_method, order.total_amount)
        result = {
            "order_id": str(order.id),
            "total_amount": order.total_amount,
            "payment_status": order.payment_status,
            "message": message,
        }
        if instructions:
            result["instructions"] = instructions
        return result
